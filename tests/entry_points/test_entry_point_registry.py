import pytest

from reviewflow.entry_points import service
from reviewflow.store import models


@pytest.fixture
def registry(store_service):
    return service.EntryPointRegistry(store=store_service)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("table 1", "table_1"),
        ("  front   door  ", "front_door"),
        ("a\tb\nc", "a_b_c"),
        ("email", "email"),
    ],
)
def test_canonicalize_src(raw, expected):
    assert service.canonicalize_src(raw) == expected


def test_build_customer_link_encodes_src():
    link = service.build_customer_link("https://x.test/", "bistro-co", "a&b")

    assert link == "https://x.test/bistro-co?src=a%26b"


@pytest.mark.asyncio
async def test_upsert_new_entry_point_is_prepended(registry):
    entry_point, result = await registry.upsert(label=" Patio ", src=" patio table ")

    assert result.persisted is True
    assert entry_point.label == "Patio"
    assert entry_point.src == "patio_table"
    entry_points = await registry.get_entry_points()
    assert entry_points[0] == entry_point
    assert [ep.id for ep in entry_points[1:]] == ["ep_table_1", "ep_email"]


@pytest.mark.asyncio
async def test_upsert_existing_id_keeps_position(registry):
    await registry.upsert(label="Newsletter", src="news", entry_point_id="ep_email")

    entry_points = await registry.get_entry_points()
    assert [ep.id for ep in entry_points] == ["ep_table_1", "ep_email"]
    assert entry_points[1].label == "Newsletter"
    assert entry_points[1].src == "news"


@pytest.mark.asyncio
async def test_upsert_unknown_id_prepends_with_that_id(registry):
    entry_point, _ = await registry.upsert(
        label="Bar", src="bar", entry_point_id="ep_bar"
    )

    assert entry_point.id == "ep_bar"
    assert (await registry.get_entry_points())[0].id == "ep_bar"


@pytest.mark.asyncio
@pytest.mark.parametrize(("label", "src"), [("", "x"), ("x", "   "), (" ", " ")])
async def test_upsert_rejects_missing_fields_without_mutation(
    registry, store_service, label, src
):
    with pytest.raises(models.ValidationError):
        await registry.upsert(label=label, src=src)

    assert [ep.id for ep in await registry.get_entry_points()] == [
        "ep_table_1",
        "ep_email",
    ]
    assert await store_service.get_undo_snapshot() is None


@pytest.mark.asyncio
async def test_delete_removes_entry_point(registry):
    await registry.delete("ep_table_1")

    assert [ep.id for ep in await registry.get_entry_points()] == ["ep_email"]


@pytest.mark.asyncio
async def test_delete_unknown_id_is_a_no_op(registry):
    result = await registry.delete("ep_missing")

    assert result.persisted is True
    assert [ep.id for ep in await registry.get_entry_points()] == [
        "ep_table_1",
        "ep_email",
    ]


@pytest.mark.asyncio
async def test_entry_point_changes_can_be_undone(registry, store_service):
    await registry.delete("ep_table_1")

    await store_service.undo_config_change()

    assert [ep.id for ep in await registry.get_entry_points()] == [
        "ep_table_1",
        "ep_email",
    ]


@pytest.mark.asyncio
async def test_links_use_business_slug(registry):
    links = await registry.links("https://reviews.example.com")

    assert [link for _, link in links] == [
        "https://reviews.example.com/bistro-co?src=table_1",
        "https://reviews.example.com/bistro-co?src=email",
    ]
