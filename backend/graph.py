"""
LangGraph state machine — fan-out / fan-in verification pipeline.

Graph topology:
  START → extractor ┐
  START → metadata  ├→ verifier → scorer → END
  START → claims    │
  START → auditor   ┘

The four analysers have no data dependency on one another and run in the
same superstep; the verifier waits for all of them. The verification feed
is passed in the runnable config:
  graph.invoke(state, config={"configurable": {"verification_feed": feed}})
"""

from langgraph.graph import END, START, StateGraph

from agents.auditor import auditor_node
from agents.claims import claims_node
from agents.extractor import extractor_node
from agents.metadata import metadata_node
from agents.scorer import scorer_node
from agents.verifier import verifier_node
from state import VerificationState

ANALYSERS = ["extractor", "metadata", "claims", "auditor"]

workflow = StateGraph(VerificationState)

workflow.add_node("extractor", extractor_node)
workflow.add_node("metadata", metadata_node)
workflow.add_node("claims", claims_node)
workflow.add_node("auditor", auditor_node)
workflow.add_node("verifier", verifier_node)
workflow.add_node("scorer", scorer_node)

for name in ANALYSERS:
    workflow.add_edge(START, name)

workflow.add_edge(ANALYSERS, "verifier")
workflow.add_edge("verifier", "scorer")
workflow.add_edge("scorer", END)

graph = workflow.compile()
