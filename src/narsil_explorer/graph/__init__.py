from .reducer import ReducedGraphCache, connectivity_scores, rank_nodes, reduce_graph

__all__ = ["ReducedGraphCache", "connectivity_scores", "rank_nodes", "reduce_graph"]
