"""Agency Orchestrator.

Routes free-text business requests to department agents (construction,
manufacturing, HR) and runs ordered multi-step workflows across them:
- deterministic keyword routing with an optional LLM classifier
- a linear step engine and LangGraph-backed graph workflows
- configuration loaded from `.env`, structured logging
"""

__version__ = "0.1.0"

from agency_orchestrator.config import OrchestratorSettings

__all__ = ["__version__", "OrchestratorSettings"]
