from io import BytesIO
from pathlib import Path

from openpyxl import load_workbook

from cardo.data.hub_repository import DEFAULT_HUBS, resolve_district
from cardo.persistence.filesystem import JsonFileStore, MemoryKeyValueStore
from cardo.services.context import AppContext
from cardo.services.hub_network import UNASSIGNED_DISTRICT, HubNetworkAggregator, export_workbook


def test_resolve_district_variants() -> None:
    assert resolve_district("Kumily Cardamom Hub", DEFAULT_HUBS) == "Idukki"
    assert resolve_district("kumily  cardamom hub", DEFAULT_HUBS) == "Idukki"
    assert resolve_district("Wayanad", DEFAULT_HUBS) == "Wayanad"
    assert resolve_district("Kochi Export Terminal (Ernakulam)", DEFAULT_HUBS) == "Ernakulam"
    assert resolve_district("Somewhere else", DEFAULT_HUBS) is None
    assert resolve_district("", DEFAULT_HUBS) is None


def test_on_accepted_is_idempotent(context: AppContext, make_payload) -> None:
    created = context.store.submit(make_payload())
    accepted = context.store.transition(created.id, "accept")

    assert context.aggregator.on_accepted(accepted) is True
    assert context.aggregator.on_accepted(accepted) is False
    assert len(context.aggregator.get_by_district("Idukki")) == 1


def test_unresolved_district_goes_to_unassigned(context: AppContext, make_payload) -> None:
    created = context.store.submit(make_payload(preferredHub="Munnar estate"))

    context.gateway.respond(created.id, "accept")

    assert [record.request_id for record in context.aggregator.get_by_district(UNASSIGNED_DISTRICT)] == [created.id]


def test_summaries_treat_missing_amount_as_zero(context: AppContext, make_payload) -> None:
    for _ in range(2):
        context.gateway.respond(context.store.submit(make_payload()).id, "accept")

    assert context.aggregator.list_district_summaries() == [
        {"district": "Idukki", "requestCount": 2, "totalAmount": 0},
    ]


def test_index_survives_restart_through_file_store(tmp_path: Path, context: AppContext, make_payload) -> None:
    store = JsonFileStore(tmp_path)
    aggregator = HubNetworkAggregator(store)
    accepted = context.store.transition(context.store.submit(make_payload()).id, "accept")
    aggregator.on_accepted(accepted)

    reloaded = HubNetworkAggregator(JsonFileStore(tmp_path))

    assert reloaded.request_ids() == {accepted.id}
    assert (tmp_path / "hub_network.json").exists()


def test_corrupt_cache_is_ignored_and_rebuilt(tmp_path: Path, context: AppContext, make_payload) -> None:
    accepted = context.store.transition(context.store.submit(make_payload()).id, "accept")
    (tmp_path / "hub_network.json").write_text("{not json", encoding="utf-8")

    aggregator = HubNetworkAggregator(JsonFileStore(tmp_path))
    assert aggregator.request_ids() == set()

    assert aggregator.ensure_consistent(context.store.all()) is True
    assert aggregator.request_ids() == {accepted.id}
    assert aggregator.ensure_consistent(context.store.all()) is False


def test_rebuild_includes_completed_and_skips_rejected(context: AppContext, make_payload) -> None:
    completed = context.store.submit(make_payload())
    rejected = context.store.submit(make_payload(preferredHub="Wayanad Spice Center"))
    context.store.transition(completed.id, "accept")
    context.store.transition(completed.id, "complete")
    context.store.transition(rejected.id, "reject")
    aggregator = HubNetworkAggregator(MemoryKeyValueStore())

    count = aggregator.rebuild(context.store.all())

    assert count == 1
    assert aggregator.request_ids() == {completed.id}


def test_export_workbook_has_summary_and_district_sheets(context: AppContext, make_payload) -> None:
    accepted = context.gateway.respond(context.store.submit(make_payload()).id, "accept")

    workbook = load_workbook(BytesIO(export_workbook(context.aggregator)))

    assert workbook.sheetnames == ["Summary", "Idukki"]
    summary_rows = list(workbook["Summary"].iter_rows(values_only=True))
    assert summary_rows[1] == ("Idukki", 1, 0)
    district_rows = list(workbook["Idukki"].iter_rows(values_only=True))
    assert district_rows[1][0] == accepted.id
