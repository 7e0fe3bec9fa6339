"""Core module - shared state and helper functions."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Optional

from quiz_assessment.events import QuizEventBus

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

logger = logging.getLogger(__name__)

# =============================================================================
# CONFIGURATION
# =============================================================================

# ID do AgentFS onde quizzes e tentativas sao persistidos
AGENTFS_ID = os.getenv("QUIZ_AGENTFS_ID", "quiz-assessment")

# Global AgentFS and event bus instances
agentfs: Optional[AgentFS] = None
event_bus: Optional[QuizEventBus] = None


# =============================================================================
# STATE MANAGEMENT
# =============================================================================


async def get_agentfs() -> AgentFS:
    """Get AgentFS instance (aberto sob demanda)."""
    global agentfs
    if agentfs is None:
        from agentfs_sdk import AgentFS, AgentFSOptions

        agentfs = await AgentFS.open(AgentFSOptions(id=AGENTFS_ID))
        logger.info(f"AgentFS aberto: {AGENTFS_ID}")
    return agentfs


def get_event_bus() -> QuizEventBus:
    """Get event bus singleton."""
    global event_bus
    if event_bus is None:
        event_bus = QuizEventBus()
    return event_bus


async def close() -> None:
    """Fecha recursos globais."""
    global agentfs, event_bus
    if agentfs is not None:
        try:
            await agentfs.close()
        except Exception as e:
            logger.warning(f"Erro ao fechar AgentFS: {e}")
        agentfs = None
    event_bus = None
