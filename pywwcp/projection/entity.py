"""
 Entity projector

 Renders one entity and, depending on the DirectiveSet, its relations as
 identifiers or as nested projections. Expansion never recurses forever:
 the relation pointing back to the entity just visited is hidden, and an
 entity already on the current path is never entered again. In an expanded
 array it appears as a reference object carrying only its "@id"; a to-one
 relation pointing at it is rendered as an identifier.
"""
import logging
from typing import FrozenSet, Optional

from pywwcp.directives import DirectiveSet, InfoStatus
from pywwcp.entities import CONTEXT_PREFIX, CONTEXTS, Entity
from pywwcp.projection.decorators import atomic_projection
from pywwcp.relations import relations_of

log = logging.getLogger(__name__)


@atomic_projection
def project(network, entity: Entity, directives: DirectiveSet, suppressed_relation: Optional[str] = None,
            embedded: bool = False) -> dict:
    """
    Project an entity to a JSON object.

    Args:
        network: The RoamingNetwork used to resolve relations.
        entity: The entity to render.
        directives: Resolved directives, applied to every entity reached.
        suppressed_relation: Relation forced to HIDDEN on this entity only.
        embedded: True for nested objects, which carry no @context.
    """
    return _project(network, entity, directives, suppressed_relation, embedded, frozenset())


def _project(network, entity: Entity, directives: DirectiveSet, suppressed_relation: Optional[str],
             embedded: bool, path: FrozenSet) -> dict:
    path = path | {entity.id}
    effective = directives.with_hidden(suppressed_relation)

    out = {"@id": str(entity.id)}
    if not embedded:
        out["@context"] = CONTEXT_PREFIX + CONTEXTS[entity.kind]
    if entity.name:
        out["name"] = entity.name
    if entity.description:
        out["description"] = entity.description
    for key, value in entity.attributes.items():
        out.setdefault(key, value)

    # First pass: resolve visible relations and decide which ones really expand
    rendered = []
    for relation in relations_of(entity.kind):
        directive = effective.get(relation.name)
        if directive == InfoStatus.HIDDEN:
            continue
        resolved = relation.resolve(network, entity)
        if relation.to_one:
            related = [] if resolved is None else [resolved]
        else:
            related = list(resolved)
        if directive == InfoStatus.EXPAND and relation.to_one and related and related[0] in path:
            log.debug(f"Not expanding {relation.name} of {entity.id}: would re-enter the projection path")
            directive = InfoStatus.SHOW_ID_ONLY
        rendered.append((relation, related, directive))
    expanded = {relation.name for relation, _, directive in rendered if directive == InfoStatus.EXPAND}

    for relation, related, directive in rendered:
        if any(name in expanded for name in relation.subsumed_by):
            continue
        if directive == InfoStatus.EXPAND:
            nested = [{"@id": str(i)} if i in path
                      else _project(network, network.get(relation.target, i), directives, relation.inverse, True, path)
                      for i in related]
            if relation.to_one:
                out[relation.expand_key] = nested[0] if nested else None
            else:
                out[relation.expand_key] = nested
        elif relation.to_one:
            out[relation.ids_key] = str(related[0]) if related else None
        else:
            out[relation.ids_key] = [str(i) for i in related]
    return out
