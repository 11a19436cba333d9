import pytest

from app.services.providers import AttemptOutcome, ChatResult, FailureKind


class FakeProvider:
    """Provider stand-in that replays scripted outcomes and records calls."""

    def __init__(self, provider_id, outcomes=None):
        self.provider_id = provider_id
        self.outcomes = list(outcomes or [])
        self.calls = []

    def attempt(self, message, context=None):
        self.calls.append((message, context))
        if not self.outcomes:
            return AttemptOutcome.failed(FailureKind.UNAVAILABLE, "no scripted outcome")
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, FailureKind):
            return AttemptOutcome.failed(outcome, f"{outcome.value} from {self.provider_id}")
        return AttemptOutcome.success(ChatResult(content=outcome, provider=self.provider_id))


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingSleep:
    def __init__(self, clock=None):
        self.calls = []
        self.clock = clock

    def __call__(self, seconds):
        self.calls.append(seconds)
        if self.clock is not None:
            self.clock.advance(seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep(clock):
    return RecordingSleep(clock)


@pytest.fixture
def make_service(clock, sleep):
    """Build an AIService over FakeProviders: make_service(("a", ["ok"]), ("b", [429]))."""
    from app.services.ai_service import AIService
    from app.services.client_state import ClientState

    def _make(*specs, **kwargs):
        providers = []
        for provider_id, outcomes in specs:
            scripted = [FailureKind.RATE_LIMITED if o == 429 else
                        FailureKind.UNAUTHORIZED if o == 401 else
                        FailureKind.BAD_REQUEST if o == 400 else
                        FailureKind.UNAVAILABLE if o == 500 else o
                        for o in outcomes]
            providers.append(FakeProvider(provider_id, scripted))
        state = ClientState([p.provider_id for p in providers], clock=clock)
        service = AIService(providers, state=state, sleep=sleep, **kwargs)
        return service, providers

    return _make
