from __future__ import annotations

import threading

import pytest

from fediservers.config import FetcherConfig
from fediservers.models import ServerRecord
from fediservers.services.fetcher import InstanceFetcher
from fediservers.services.pipeline import EnrichmentPipeline


def _api(domain: str) -> str:
    return f"https://{domain}/api/v2/instance"


def _home(domain: str) -> str:
    return f"https://{domain}/"


def _pipeline(routes, session_factory, calls=None, concurrency=1) -> EnrichmentPipeline:
    fetcher = InstanceFetcher(session_factory(routes, calls))
    return EnrichmentPipeline(fetcher, concurrency=concurrency, sleep=lambda seconds: None)


def test_api_with_description_is_used_directly(session_factory, response_factory, instance_payload) -> None:
    routes = {
        _api("neodb.social"): response_factory(payload=instance_payload),
        _home("neodb.social"): response_factory('<link rel="icon" href="/icon.png">'),
    }

    record = _pipeline(routes, session_factory).process_domain("neodb.social")

    assert record.version == "4.1.0"
    assert record.description == "A place for reviews"
    assert record.icon == "https://neodb.social/icon.png"


def test_empty_api_description_uses_homepage(session_factory, response_factory, instance_payload) -> None:
    instance_payload["description"] = "   "
    calls: list[str] = []
    routes = {
        _api("neodb.social"): response_factory(payload=instance_payload),
        _home("neodb.social"): response_factory(
            '<meta name="description" content="books and more"><link rel="icon" href="/i.png">'
        ),
    }

    record = _pipeline(routes, session_factory, calls).process_domain("neodb.social")

    assert record.description == "Books and more"
    assert record.icon == "https://neodb.social/i.png"
    assert calls.count(_home("neodb.social")) == 1


def test_empty_api_description_without_homepage_stays_empty(session_factory, response_factory, instance_payload) -> None:
    instance_payload["description"] = ""
    routes = {_api("neodb.social"): response_factory(payload=instance_payload)}

    record = _pipeline(routes, session_factory).process_domain("neodb.social")

    assert record.version == "4.1.0"
    assert record.description == ""
    assert record.icon == ""


def test_api_failure_yields_placeholder_with_homepage_description(session_factory, response_factory) -> None:
    routes = {
        _api("down.example"): response_factory(status_code=502),
        _home("down.example"): response_factory('<meta content="still online" name="description">'),
    }

    record = _pipeline(routes, session_factory).process_domain("down.example")

    assert record.version == "Unknown"
    assert record.description == "Still online"
    assert record.proxied_thumbnail == "https://neodb.internal/placeholder"


def test_total_failure_yields_empty_placeholder(session_factory) -> None:
    record = _pipeline({}, session_factory).process_domain("gone.example")

    assert record == ServerRecord.placeholder("gone.example", title="Gone")
    assert record.description == ""
    assert record.icon == ""


def test_icon_error_does_not_block_record(session_factory, response_factory, instance_payload, monkeypatch) -> None:
    routes = {_api("neodb.social"): response_factory(payload=instance_payload)}
    pipeline = _pipeline(routes, session_factory)

    def broken_icon(domain: str) -> str:
        raise RuntimeError("boom")

    monkeypatch.setattr(pipeline.fetcher, "fetch_homepage_icon", broken_icon)

    record = pipeline.process_domain("neodb.social")

    assert record.icon == ""
    assert record.version == "4.1.0"


def test_run_processes_each_domain_once_across_workers(session_factory, response_factory, instance_payload) -> None:
    domains = [f"s{index}.example" for index in range(25)]
    routes = {}
    for index, domain in enumerate(domains):
        payload = dict(instance_payload, domain=domain)
        payload["usage"] = {"users": {"active_month": index}}
        if index % 3 == 0:
            routes[_api(domain)] = response_factory(status_code=500)
        else:
            routes[_api(domain)] = response_factory(payload=payload)
    calls: list[str] = []
    pauses: list[float] = []
    fetcher = InstanceFetcher(session_factory(routes, calls))
    pipeline = EnrichmentPipeline(fetcher, concurrency=4, jitter=0.25, sleep=pauses.append)

    records = pipeline.run(domains)

    assert sorted(record.domain for record in records) == sorted(domains)
    assert sorted(calls.count(_api(domain)) for domain in domains) == [1] * len(domains)
    assert sum(record.version == "Unknown" for record in records) == 9
    assert len(pauses) == len(domains)
    assert all(0 <= pause <= 0.25 for pause in pauses)


def test_run_uses_several_threads(session_factory) -> None:
    seen: set[str] = set()
    barrier = threading.Barrier(2, timeout=5)

    class RecordingFetcher(InstanceFetcher):
        def fetch_instance_info(self, domain):
            seen.add(threading.current_thread().name)
            barrier.wait()
            return None

    pipeline = EnrichmentPipeline(
        RecordingFetcher(session_factory({})), concurrency=2, sleep=lambda seconds: None
    )

    records = pipeline.run(["a.example", "b.example"])

    assert len(records) == 2
    assert len(seen) == 2


def test_run_empty_and_skips_blank_domains(session_factory) -> None:
    pipeline = _pipeline({}, session_factory, concurrency=3)

    assert pipeline.run([]) == []
    assert [record.domain for record in pipeline.run(["", "x.example"])] == ["x.example"]


def test_run_propagates_unexpected_errors(session_factory, monkeypatch) -> None:
    pipeline = _pipeline({}, session_factory, concurrency=2)

    def explode(domain, worker_id=None):
        raise KeyError(domain)

    monkeypatch.setattr(pipeline, "process_domain", explode)

    with pytest.raises(KeyError):
        pipeline.run(["a.example"])


def test_from_config() -> None:
    pipeline = EnrichmentPipeline.from_config(FetcherConfig(concurrency=3, timeout=4, jitter=0))

    assert pipeline.concurrency == 3
    assert pipeline.jitter == 0
    assert pipeline.fetcher.timeout == 4
