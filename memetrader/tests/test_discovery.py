from datetime import datetime, timezone

import pytest

from memetrader.discovery.clanker import ClankerScanner, ClankerToken
from memetrader.discovery.github import GitHubRepo, GitHubScanner
from memetrader.discovery.repo_tokens import RepoTokenDiscovery, age_days, clean_repo_name, parse_created_at

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class _FakeResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")

    def json(self):
        return self._payload


class _FakeSession:
    def __init__(self, resp):
        self.resp = resp
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers})
        if isinstance(self.resp, Exception):
            raise self.resp
        return self.resp


class _FakeGitHub:
    def __init__(self, repos):
        self.repos = repos

    def get_trending_repos(self):
        return list(self.repos)


class _FakeClanker:
    def __init__(self, by_query):
        self.by_query = by_query
        self.queries = []

    def search_token(self, query):
        self.queries.append(query)
        return list(self.by_query.get(query, []))


def _repo(name):
    return GitHubRepo(name=name, full_name=f"me/{name}", description="", stargazers_count=1, html_url="")


def _token(addr, created_at, symbol="TKN"):
    return ClankerToken(name=symbol, symbol=symbol, contract_address=addr, created_at=created_at, pool_address="0xPool")


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("myCoolRepo", "my cool repo"),
        ("agent-kit_v2.js", "agent kit v2 js"),
        ("plain", "plain"),
    ],
)
def test_clean_repo_name(raw, expected):
    assert clean_repo_name(raw) == expected


def test_parse_created_at_variants():
    assert parse_created_at("2026-10-18T12:00:00Z") == datetime(2026, 10, 18, 12, tzinfo=timezone.utc)
    assert parse_created_at("2026-10-18T12:00:00").tzinfo is not None
    assert parse_created_at("") is None
    assert parse_created_at("yesterday") is None


def test_age_days():
    assert age_days("2026-10-17T12:00:00Z", NOW) == pytest.approx(2.0)
    assert age_days("garbage", NOW) is None


def test_discovery_picks_first_fresh_match_per_repo():
    clanker = _FakeClanker(
        {
            "cool repo": [_token("0xA", "2026-10-18T00:00:00Z", "COOL"), _token("0xZ", "2026-10-19T00:00:00Z")],
            "old thing": [_token("0xB", "2026-09-01T00:00:00Z", "OLD")],
            "no date": [_token("0xC", "", "NODATE")],
        }
    )
    delays = []
    disc = RepoTokenDiscovery(
        _FakeGitHub([_repo("coolRepo"), _repo("old-thing"), _repo("no_date"), _repo("nothing")]),
        clanker,
        max_age_days=7,
        delay=lambda: delays.append(1),
        now=lambda: NOW,
    )

    out = disc.list_candidates()

    assert [c.address for c in out] == ["0xA"]
    assert out[0].repo == "coolRepo"
    assert out[0].pool_address == "0xPool"
    assert clanker.queries == ["cool repo", "old thing", "no date", "nothing"]
    assert len(delays) == 4


def test_discovery_dedupes_same_token_across_repos():
    tok = _token("0xA", "2026-10-18T00:00:00Z")
    disc = RepoTokenDiscovery(
        _FakeGitHub([_repo("alpha"), _repo("beta")]),
        _FakeClanker({"alpha": [tok], "beta": [tok]}),
        now=lambda: NOW,
    )
    assert [c.repo for c in disc.list_candidates()] == ["alpha"]


def test_github_scanner_parses_items():
    session = _FakeSession(
        _FakeResp({"items": [{"name": "x", "full_name": "o/x", "stargazers_count": 12}, {"bogus": True}]})
    )
    gh = GitHubScanner(token="ghp_abc", session=session)

    repos = gh.get_trending_repos()

    assert repos == [GitHubRepo("x", "o/x", "", 12, "")]
    call = session.calls[0]
    assert call["params"]["q"].startswith("created:>")
    assert call["params"]["q"].endswith("sort:stars")
    assert call["headers"]["Authorization"] == "token ghp_abc"


def test_github_query_window():
    assert GitHubScanner(days=7)._query(NOW) == "created:>2026-10-12 sort:stars"


def test_github_scanner_error_is_empty():
    gh = GitHubScanner(session=_FakeSession(_FakeResp({}, status_code=403)))
    assert gh.get_trending_repos() == []


@pytest.mark.parametrize(
    "payload",
    [
        [{"name": "A", "symbol": "A", "contract_address": "0xA", "created_at": "2026-10-18T00:00:00Z"}],
        {"data": [{"name": "A", "symbol": "A", "contract_address": "0xA", "created_at": "2026-10-18T00:00:00Z"}]},
    ],
)
def test_clanker_scanner_accepts_both_shapes(payload):
    session = _FakeSession(_FakeResp(payload))
    toks = ClankerScanner(session=session).search_token("a")
    assert [t.contract_address for t in toks] == ["0xA"]
    assert session.calls[0]["params"]["chainId"] == 8453


def test_clanker_scanner_error_is_empty():
    assert ClankerScanner(session=_FakeSession(ConnectionError("down"))).search_token("a") == []
