"""
Graph construction for the itinerary pipeline.
"""
from langgraph.graph import StateGraph, END
from smarttrip.agents.state import (
    CurationBranch,
    PipelineState,
    ResearchBranch,
    TripSnapshot,
    create_initial_state,
)
from smarttrip.agents.node_utilities import (
    PipelineDeps,
    create_analyze_intent,
    create_research,
    create_curation,
    create_generate_itinerary,
    create_finalize,
)

RESEARCH_NODES = {
    ResearchBranch.LUXURY: "research_luxury",
    ResearchBranch.STANDARD: "research_standard",
}

CURATION_NODES = {
    CurationBranch.ACTIVE: "curate_active",
    CurationBranch.LEISURE: "curate_leisure",
}


def initialize_state(trip: TripSnapshot) -> PipelineState:
    """
    Initialize the pipeline state.

    Args:
        trip: Trip attributes as loaded at run start

    Returns:
        Initial PipelineState
    """
    return create_initial_state(trip)


def create_itinerary_graph(deps: PipelineDeps):
    """
    Create the itinerary pipeline graph.

    intent -> research (luxury | standard) -> curation (active | leisure)
    -> synthesis -> finalize

    Args:
        deps: Completion client, record store and travel-data client

    Returns:
        Compiled StateGraph
    """
    workflow = StateGraph(PipelineState)

    workflow.add_node("analyze_intent", create_analyze_intent(deps))
    for branch, node in RESEARCH_NODES.items():
        workflow.add_node(node, create_research(deps, branch))
    for branch, node in CURATION_NODES.items():
        workflow.add_node(node, create_curation(deps, branch))
    workflow.add_node("generate_itinerary", create_generate_itinerary(deps))
    workflow.add_node("finalize", create_finalize(deps))

    def route_after_intent(state: PipelineState) -> str:
        """Pick the research branch chosen at run start."""
        return RESEARCH_NODES[state["research_branch"]]

    def route_after_research(state: PipelineState) -> str:
        """Pick the curation branch chosen at run start."""
        return CURATION_NODES[state["curation_branch"]]

    workflow.set_entry_point("analyze_intent")

    workflow.add_conditional_edges(
        "analyze_intent",
        route_after_intent,
        {node: node for node in RESEARCH_NODES.values()}
    )

    for research_node in RESEARCH_NODES.values():
        workflow.add_conditional_edges(
            research_node,
            route_after_research,
            {node: node for node in CURATION_NODES.values()}
        )

    for curation_node in CURATION_NODES.values():
        workflow.add_edge(curation_node, "generate_itinerary")

    workflow.add_edge("generate_itinerary", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()
