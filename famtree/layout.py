from __future__ import annotations

from typing import Iterable, Optional

from .models import EdgeKind, Layout, LayoutEdge, LayoutNode, Person

H_SPACING = 250
V_SPACING = 200


def _collapsed_descendants(by_id: dict[str, Person]) -> set[str]:
    """Return every descendant of every collapsed person.

    A collapsed person is never excluded by its own flag, even when a cycle
    makes it its own descendant; another collapsed ancestor can still hide it.
    """

    excluded: set[str] = set()
    for person in by_id.values():
        if not person.collapsed:
            continue
        seen: set[str] = {person.id}
        frontier = [person.id]
        while frontier:
            next_frontier: list[str] = []
            for node in frontier:
                for cid in by_id[node].children_ids:
                    if cid in seen or cid not in by_id:
                        continue
                    seen.add(cid)
                    excluded.add(cid)
                    next_frontier.append(cid)
            frontier = next_frontier
    return excluded


def _select_roots(people: list[Person], focus_id: Optional[str]) -> list[str]:
    if focus_id is not None and any(p.id == focus_id for p in people):
        return [focus_id]
    roots = [p.id for p in people if not p.parent_ids]
    if roots:
        return roots
    return [people[0].id] if people else []


def _assign_generations(visible: dict[str, Person], roots: Iterable[str]) -> dict[str, int]:
    """Breadth-first generation numbering from each root.

    Children are one generation below, parents one above and spouses level.
    A node is expanded once; a later arrival at a shallower generation only
    lowers its number.
    """

    generations: dict[str, int] = {}
    for root in roots:
        if root in generations:
            continue
        generations[root] = 0
        frontier = [root]
        while frontier:
            next_frontier: list[str] = []
            for node in frontier:
                gen = generations[node]
                person = visible[node]
                steps = (
                    [(cid, gen + 1) for cid in person.children_ids]
                    + [(pid, gen - 1) for pid in person.parent_ids]
                    + [(sid, gen) for sid in person.spouse_ids]
                )
                for nb, nb_gen in steps:
                    if nb not in visible:
                        continue
                    if nb in generations:
                        if nb_gen < generations[nb]:
                            generations[nb] = nb_gen
                        continue
                    generations[nb] = nb_gen
                    next_frontier.append(nb)
            frontier = next_frontier
    return generations


def _place(
    order: dict[str, int],
    generations: dict[str, int],
    orphans: list[str],
    *,
    h_spacing: float,
    v_spacing: float,
) -> list[LayoutNode]:
    rows: dict[int, list[str]] = {}
    for pid, gen in generations.items():
        rows.setdefault(gen, []).append(pid)

    nodes: list[LayoutNode] = []
    row_index = 0
    for gen in sorted(rows):
        members = sorted(rows[gen], key=order.__getitem__)
        for i, pid in enumerate(members):
            x = (i - (len(members) - 1) / 2) * h_spacing
            nodes.append(LayoutNode(id=pid, generation=gen, x=x, y=row_index * v_spacing))
        row_index += 1

    for i, pid in enumerate(orphans):
        x = (i - (len(orphans) - 1) / 2) * h_spacing
        nodes.append(LayoutNode(id=pid, generation=0, x=x, y=row_index * v_spacing, orphan=True))

    return nodes


def _edges(people: list[Person], visible: dict[str, Person]) -> list[LayoutEdge]:
    edges: list[LayoutEdge] = []
    for person in people:
        for cid in person.children_ids:
            if cid in visible:
                edges.append(
                    LayoutEdge(id=f"{person.id}-{cid}", source=person.id, target=cid, kind=EdgeKind.DESCENT)
                )
        for sid in person.spouse_ids:
            # Undirected: emit each pair once, from the smaller id.
            if sid in visible and person.id < sid:
                edges.append(
                    LayoutEdge(id=f"spouse-{person.id}-{sid}", source=person.id, target=sid, kind=EdgeKind.SPOUSAL)
                )
    return edges


def compute_layout(
    people: Iterable[Person],
    focus_id: Optional[str] = None,
    *,
    h_spacing: float = H_SPACING,
    v_spacing: float = V_SPACING,
) -> Layout:
    """Place every visible person on a generation grid and list the edges between them.

    Visible means not hidden under a collapsed ancestor. With ``focus_id`` the
    traversal starts from that person; otherwise from everyone without recorded
    parents. People the traversal cannot reach go into an extra row at the
    bottom. The result depends only on the input, so equal input gives equal
    output.
    """

    # First occurrence wins for repeated ids.
    ordered: list[Person] = []
    by_id: dict[str, Person] = {}
    for p in people:
        if p.id in by_id:
            continue
        by_id[p.id] = p
        ordered.append(p)

    excluded = _collapsed_descendants(by_id)
    visible_people = [p for p in ordered if p.id not in excluded]
    visible = {p.id: p for p in visible_people}
    order = {p.id: i for i, p in enumerate(visible_people)}

    roots = _select_roots(visible_people, focus_id)
    generations = _assign_generations(visible, roots)
    orphans = [p.id for p in visible_people if p.id not in generations]

    nodes = _place(order, generations, orphans, h_spacing=h_spacing, v_spacing=v_spacing)
    return Layout(nodes=nodes, edges=_edges(visible_people, visible))
