# utils/graph.py
from typing import Dict, Any, List
import networkx as nx


def build_graph(workflow: Dict[str, Any]) -> nx.DiGraph:
    """
    Build a directed graph keyed by node name from an n8n export.

    n8n connections: connections[<nodeName>][<stream>][<outputIndex>] -> list of
    {node: <name>, type: "main", index: 0}. Edges to names that are not declared
    as nodes are ignored.
    """
    G = nx.DiGraph()
    nodes = workflow.get("nodes", []) or []

    for pos, n in enumerate(nodes):
        name = n.get("name")
        if name is None or name in G:
            continue
        G.add_node(name, position=pos, type=n.get("type", ""))

    conns = workflow.get("connections") or {}
    for src_name, outs in conns.items():
        if src_name not in G or not isinstance(outs, dict):
            continue
        for _stream, paths in outs.items():
            if not isinstance(paths, list):
                continue
            for path in paths:
                # Some tools put a single hop dict instead of a list
                hops = [path] if isinstance(path, dict) else (path or [])
                for hop in hops:
                    if not isinstance(hop, dict):
                        continue
                    tgt_name = hop.get("node")
                    if tgt_name in G:
                        G.add_edge(src_name, tgt_name)
    return G


def execution_order(workflow: Dict[str, Any]) -> List[str]:
    """
    Node names in a deterministic execution order.

    Topological order of the connection graph, ties broken by the node's
    position in the export. Cyclic workflows fall back to file order.
    """
    G = build_graph(workflow)
    try:
        return list(nx.lexicographical_topological_sort(G, key=lambda n: G.nodes[n]["position"]))
    except nx.NetworkXUnfeasible:
        return sorted(G.nodes, key=lambda n: G.nodes[n]["position"])
