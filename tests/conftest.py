import pytest

from fakes import FakeLLM
from socratix_tutor.orchestrator import SocraticOrchestrator
from socratix_tutor.session_manager import SessionManager


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def orchestrator(fake_llm):
    return SocraticOrchestrator(llm=fake_llm, session_manager=SessionManager())
