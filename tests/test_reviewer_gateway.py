from cardo.models.domain import RequestStatus
from cardo.services.context import AppContext
from cardo.services.reviewer import ReviewerScope


def _seed(context: AppContext, make_payload) -> dict[str, str]:
    ids = {
        "idukki_pending": context.store.submit(make_payload(customerName="Ravi Pillai")).id,
        "idukki_accepted": context.store.submit(make_payload(customerName="Meera Nair")).id,
        "wayanad_rejected": context.store.submit(
            make_payload(customerName="Joseph Mathew", preferredHub="Wayanad Spice Center", customerEmail="joseph@example.com")
        ).id,
        "unknown_pending": context.store.submit(make_payload(customerName="Fatima Rahman", preferredHub="Munnar estate")).id,
    }
    context.gateway.respond(ids["idukki_accepted"], "accept", "Ready to dispatch")
    context.gateway.respond(ids["wayanad_rejected"], "reject", "Out of stock")
    return ids


def test_counts_cover_scoped_population_regardless_of_filters(context: AppContext, make_payload) -> None:
    _seed(context, make_payload)

    page = context.gateway.list(ReviewerScope(role="admin"), status="pending")

    assert page.total == 2
    assert page.counts_by_status == {"pending": 2, "accepted": 1, "rejected": 1, "completed": 0}
    assert all(item.status is RequestStatus.pending for item in page.items)


def test_hub_scope_only_sees_its_district(context: AppContext, make_payload) -> None:
    _seed(context, make_payload)

    page = context.gateway.list(ReviewerScope(role="hub", district="idukki"))

    assert page.total == 2
    assert {item.hub_district for item in page.items} == {"Idukki"}
    assert page.counts_by_status["rejected"] == 0


def test_customer_scope_only_sees_own_requests(context: AppContext, make_payload) -> None:
    _seed(context, make_payload)

    page = context.gateway.list(ReviewerScope(role="customer", customer_email="joseph@example.com"))

    assert [item.customer_name for item in page.items] == ["Joseph Mathew"]


def test_search_and_pagination(context: AppContext, make_payload) -> None:
    ids = _seed(context, make_payload)

    by_name = context.gateway.list(ReviewerScope(), query="meera")
    by_id = context.gateway.list(ReviewerScope(), query=ids["unknown_pending"][:8])
    first_page = context.gateway.list(ReviewerScope(), page=1, limit=3)
    second_page = context.gateway.list(ReviewerScope(), page=2, limit=3)

    assert [item.id for item in by_name.items] == [ids["idukki_accepted"]]
    assert [item.id for item in by_id.items] == [ids["unknown_pending"]]
    assert first_page.pages == 2 and len(first_page.items) == 3
    assert len(second_page.items) == 1
    # Newest first
    assert first_page.items[0].id == ids["unknown_pending"]


def test_accepting_kumily_request_indexes_it_under_idukki(context: AppContext, make_payload) -> None:
    created = context.store.submit(make_payload(preferredHub="Kumily Cardamom Hub"))

    updated = context.gateway.respond(created.id, "accept", "Confirmed")

    assert updated.status is RequestStatus.accepted
    records = context.aggregator.get_by_district("Idukki")
    assert [record.request_id for record in records] == [created.id]
    assert records[0].customer_name == "Anita Menon"


def test_rejection_and_completion_do_not_duplicate_index_entries(context: AppContext, make_payload) -> None:
    ids = _seed(context, make_payload)

    context.gateway.respond(ids["idukki_accepted"], "complete")

    assert context.aggregator.request_ids() == {ids["idukki_accepted"]}
    assert context.aggregator.get_by_district("Wayanad") == []


def test_aggregator_failure_keeps_transition(context: AppContext, make_payload, monkeypatch) -> None:
    created = context.store.submit(make_payload())

    def explode(request):
        raise OSError("disk full")

    monkeypatch.setattr(context.aggregator, "on_accepted", explode)

    updated = context.gateway.respond(created.id, "accept")

    assert updated.status is RequestStatus.accepted
    assert context.sync_hub_network() is True
    assert context.aggregator.request_ids() == {created.id}


def test_kumily_order_accepted_end_to_end(context: AppContext, make_payload) -> None:
    created = context.store.submit(
        make_payload(
            quantity=50,
            grade="A Grade",
            budgetMin=800,
            budgetMax=1000,
            preferredHub="Kumily Cardamom Hub",
        )
    )

    assert created.status is RequestStatus.pending
    assert (created.quantity, created.grade, created.budget_min, created.budget_max) == (50, "A Grade", 800, 1000)
    assert created.preferred_hub == "Kumily Cardamom Hub"

    updated = context.gateway.respond(created.id, "accepted", "We will process your order.")

    assert updated.status is RequestStatus.accepted
    assert updated.hub_response.message == "We will process your order."
    notifications, total, unread = context.notifications.list_for("anita@example.com", limit=10)
    assert total == 1 and unread == 1
    assert notifications[0].data == {
        "orderRequestId": created.id,
        "status": "accepted",
        "preferredHub": "Kumily Cardamom Hub",
    }
    records = context.aggregator.get_by_district("Idukki")
    assert [record.request_id for record in records] == [created.id]
    assert records[0].total_amount is None
    assert context.aggregator.list_district_summaries() == [
        {"district": "Idukki", "requestCount": 1, "totalAmount": 0},
    ]
