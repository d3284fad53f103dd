# (c) Nelen & Schuurmans

from collections.abc import Mapping

from graphql import FieldNode
from graphql import FragmentDefinitionNode
from graphql import FragmentSpreadNode
from graphql import GraphQLResolveInfo
from graphql import InlineFragmentNode
from graphql import SelectionSetNode

__all__ = ["get_requested_fields"]


def _add_field_names(
    field_names: set[str],
    selection_set: SelectionSetNode,
    fragments: Mapping[str, FragmentDefinitionNode],
) -> None:
    for selection in selection_set.selections:
        if isinstance(selection, FragmentSpreadNode):
            _add_field_names(
                field_names, fragments[selection.name.value].selection_set, fragments
            )
        elif isinstance(selection, InlineFragmentNode):
            _add_field_names(field_names, selection.selection_set, fragments)
        elif isinstance(selection, FieldNode):
            field_names.add(selection.name.value)


def get_requested_fields(info: GraphQLResolveInfo) -> set[str]:
    """List the fields that are selected directly below the resolved field.

    Fragment spreads and inline fragments are expanded; nested selections are not
    included. Only 'field_nodes' and 'fragments' of the info object are used.
    """
    field_names: set[str] = set()
    for field_node in info.field_nodes:
        if field_node.selection_set is not None:
            _add_field_names(field_names, field_node.selection_set, info.fragments)
    return field_names
