import time
import logging
import pytest
import requests
import responses
import threading
from unittest.mock import MagicMock
from urllib.parse import parse_qs

from hotspot_login.account import Credentials, Settings
from hotspot_login.config import Config
from hotspot_login.log_sink import EventReporter, LogSink
from hotspot_login.login import LoginExecutor
from hotspot_login.session import SessionStore


LOGIN_URL = "http://portal.test/login"
CREDENTIALS = Credentials("alice", "s3cret")


# ========
# FIXTURES
# ========
class FakeProbe:
    def __init__(self, connected=True):
        self.connected = connected
        self.calls = 0

    def is_connected(self):
        self.calls += 1
        return self.connected

@pytest.fixture
def sink(tmp_path, clock):
    return LogSink(tmp_path / "login.log", time_service=clock)

@pytest.fixture
def store(tmp_path, clock):
    return SessionStore(tmp_path / "session.json", time_service=clock)

@pytest.fixture
def sleep():
    return MagicMock()

@pytest.fixture
def probe():
    return FakeProbe()

@pytest.fixture
def executor(store, sink, probe, sleep, clock):
    return LoginExecutor(
        store,
        EventReporter(sink),
        probe=probe,
        login_url=LOGIN_URL,
        time_service=clock,
        sleep=sleep,
    )

def post_count():
    return sum(1 for call in responses.calls if call.request.method == "POST")


# ===================================
# TEST GROUP: Retry Budget
# ===================================
# Function: LoginExecutor.login()
# -------------------------------
@pytest.mark.parametrize(
    "auto_retry, expected_attempts, expected_sleeps",
    [
        # ✅ Full attempt budget with fixed delays between tries
        (True, 3, 2),

        # ❌ Retry disabled → exactly one attempt
        (False, 1, 0),
    ],
)

@responses.activate
def test_login_always_failing(executor, sleep, auto_retry, expected_attempts, expected_sleeps):
    """A transport that always fails exhausts the budget and returns a failure value"""
    responses.add(responses.POST, LOGIN_URL, status=500)

    outcome = executor.login(CREDENTIALS, Settings(auto_retry=auto_retry, check_connection=False))

    assert outcome.success is False
    assert outcome.attempt == expected_attempts
    assert "HTTP 500" in outcome.message
    assert post_count() == expected_attempts
    assert sleep.call_count == expected_sleeps
    for call in sleep.call_args_list:
        assert call.args == (Config.RETRY_DELAY_S,)

@responses.activate
def test_login_no_retry_on_success(executor, sleep):
    """autoRetry=false still performs exactly one attempt on success"""
    responses.add(responses.POST, LOGIN_URL, status=200)

    outcome = executor.login(CREDENTIALS, Settings(auto_retry=False, check_connection=False))

    assert outcome.success is True
    assert outcome.attempt == 1
    assert post_count() == 1
    sleep.assert_not_called()

@responses.activate
def test_login_succeeds_on_third_attempt(executor, store, sleep):
    """Fail, fail, succeed → attempt=3 returned and persisted"""
    responses.add(responses.POST, LOGIN_URL, status=503)
    responses.add(responses.POST, LOGIN_URL, body=requests.exceptions.ConnectTimeout("slow"))
    responses.add(responses.POST, LOGIN_URL, status=200)

    outcome = executor.login(CREDENTIALS, Settings(check_connection=False))

    assert outcome.success is True
    assert outcome.attempt == 3
    assert outcome.message == "✅ Login successful!"
    assert sleep.call_count == 2

    record = store.load()
    assert record.username == "alice"
    assert record.attempt == 3

@pytest.mark.parametrize(
    "status",
    [
        # ❌ validate-status policy: only 200 counts as success
        201,
        204,
        302,
        401,
    ],
)

@responses.activate
def test_login_non_200_is_failure(executor, store, status):
    responses.add(responses.POST, LOGIN_URL, status=status)

    outcome = executor.login(CREDENTIALS, Settings(auto_retry=False, check_connection=False))

    assert outcome.success is False
    assert store.load() is None


# ===================================
# TEST GROUP: Wire Format
# ===================================
@responses.activate
def test_login_posts_form(executor):
    responses.add(responses.POST, LOGIN_URL, status=200)

    executor.login(CREDENTIALS, Settings(check_connection=False))

    request = responses.calls[0].request
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.headers["User-Agent"] == Config.USER_AGENT
    assert parse_qs(request.body) == {"username": ["alice"], "password": ["s3cret"]}


# ===================================
# TEST GROUP: Connectivity Gate
# ===================================
@responses.activate
def test_login_skipped_when_offline(executor, probe, store, sink):
    """checkConnection=true and a failing probe → no POST issued"""
    probe.connected = False

    outcome = executor.login(CREDENTIALS, Settings(check_connection=True))

    assert outcome.success is False
    assert "No internet connection" in outcome.message
    assert len(responses.calls) == 0
    assert store.load() is None
    assert "No internet connection" in sink.read()

@responses.activate
def test_login_probe_not_consulted_when_disabled(executor, probe):
    responses.add(responses.POST, LOGIN_URL, status=200)

    executor.login(CREDENTIALS, Settings(check_connection=False))

    assert probe.calls == 0


# ===================================
# TEST GROUP: Event Log
# ===================================
@responses.activate
def test_login_events_written_when_enabled(executor, sink):
    responses.add(responses.POST, LOGIN_URL, status=500)
    responses.add(responses.POST, LOGIN_URL, status=200)

    executor.login(CREDENTIALS, Settings(check_connection=False, log_to_file=True))

    lines = sink.read().splitlines()
    assert all(line.startswith("[09/05/25 @ 02:33:15 UTC] ") for line in lines)
    assert any("Attempt 1/3" in line for line in lines)
    assert any("Login attempt 1 failed: HTTP 500" in line for line in lines)
    assert lines[-1].endswith("✅ Login successful!")

@responses.activate
def test_login_events_not_written_when_disabled(executor, sink):
    responses.add(responses.POST, LOGIN_URL, status=200)

    executor.login(CREDENTIALS, Settings(check_connection=False, log_to_file=False))

    assert sink.read() is None


# ===================================
# TEST GROUP: Single-Flight
# ===================================
def test_concurrent_logins_share_one_flight(store, sink, clock, caplog):
    """A second caller joins the in-flight login instead of starting another"""
    entered = threading.Event()
    release = threading.Event()
    posts = []

    def slow_post(*args, **kwargs):
        posts.append(kwargs)
        entered.set()
        release.wait(5)
        resp = MagicMock()
        resp.status_code = 200
        return resp

    executor = LoginExecutor(
        store, EventReporter(sink), probe=FakeProbe(),
        login_url=LOGIN_URL, time_service=clock, sleep=MagicMock(),
    )
    settings = Settings(check_connection=False, log_to_file=False)
    results = []

    def follower_joined():
        return any("already in progress" in r.getMessage() for r in caplog.records)

    with caplog.at_level(logging.INFO), pytest.MonkeyPatch.context() as mp:
        mp.setattr("hotspot_login.login.requests.post", slow_post)

        leader = threading.Thread(target=lambda: results.append(executor.login(CREDENTIALS, settings)))
        leader.start()
        assert entered.wait(5)

        follower = threading.Thread(target=lambda: results.append(executor.login(CREDENTIALS, settings)))
        follower.start()
        deadline = time.monotonic() + 5
        while not follower_joined() and time.monotonic() < deadline:
            time.sleep(0.01)
        release.set()

        leader.join(5)
        follower.join(5)

    assert follower_joined()
    assert len(posts) == 1
    assert len(results) == 2
    assert results[0] is results[1]


@responses.activate
def test_sequential_logins_start_fresh_flights(executor):
    responses.add(responses.POST, LOGIN_URL, status=200)

    first = executor.login(CREDENTIALS, Settings(check_connection=False))
    second = executor.login(CREDENTIALS, Settings(check_connection=False))

    assert first is not second
    assert post_count() == 2

def test_unexpected_error_becomes_failure(executor, monkeypatch):
    """Programming errors inside the flight still resolve to an outcome"""
    monkeypatch.setattr(
        "hotspot_login.login.requests.post",
        MagicMock(side_effect=ValueError("Unexpected")),
    )

    outcome = executor.login(CREDENTIALS, Settings(check_connection=False))

    assert outcome.success is False
    assert "Unexpected" in outcome.message
