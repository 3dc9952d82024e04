"""Tests for VIN linkage rows, the VIN editor and the VIN list."""

import asyncio
import pytest

from epc_catalog.documents.types import CatalogDocument
from epc_catalog.errors import NotFoundError, SubmissionError, ValidationError
from epc_catalog.notifications import NoticeLevel
from epc_catalog.options.types import Option
from epc_catalog.vins.editor import VinEditor
from epc_catalog.vins.linkage import VinLinkageList
from epc_catalog.vins.manager import VinManager
from epc_catalog.vins.types import VinDetail, VinProduct


@pytest.fixture
def linkage(backend, config):
    rows = VinLinkageList(backend, config=config.vins)
    yield rows
    rows.clear()


async def drain(linkage):
    """Let every scheduled row search finish."""
    await asyncio.sleep(0)
    for row in linkage:
        await row.selector.wait_for_search()


@pytest.fixture
def documents(backend):
    return [
        backend.add_document(CatalogDocument(name="Cabin assembly", master_category_id="m1")),
        backend.add_document(CatalogDocument(name="Engine block", master_category_id="m1")),
    ]


class TestVinLinkageList:
    @pytest.mark.asyncio
    async def test_remove_middle_row_shifts_search_inputs(self, linkage):
        for _ in range(3):
            linkage.add()
        linkage.set_search_input(0, "first")
        linkage.set_search_input(1, "second")
        linkage.set_search_input(2, "third")

        linkage.remove(1)

        assert linkage.search_inputs == {0: "first", 1: "third"}
        assert linkage.search_input(0) == "first"
        assert linkage.search_input(1) == "third"
        assert linkage.search_input(2) == ""
        await drain(linkage)

    @pytest.mark.asyncio
    async def test_remove_last_row_by_negative_index(self, linkage):
        for _ in range(3):
            linkage.add()
        linkage.set_search_input(0, "a")
        linkage.set_search_input(1, "b")
        linkage.set_search_input(-1, "c")
        assert linkage.search_inputs == {0: "a", 1: "b", 2: "c"}

        linkage.remove(-1)

        assert linkage.search_inputs == {0: "a", 1: "b"}
        assert len(linkage.rows) == 2
        await drain(linkage)

    def test_remove_out_of_range(self, linkage):
        linkage.add()
        with pytest.raises(IndexError):
            linkage.remove(1)
        with pytest.raises(IndexError):
            linkage.remove(-2)
        assert len(linkage.rows) == 1

    @pytest.mark.asyncio
    async def test_add_prepends_and_shifts_up(self, linkage):
        bottom = linkage.add()
        linkage.set_search_input(0, "bottom")

        top = linkage.add()

        assert linkage[0] is top
        assert linkage[1] is bottom
        assert linkage.search_inputs == {1: "bottom"}
        await drain(linkage)

    @pytest.mark.asyncio
    async def test_removed_row_stops_searching(self, linkage, backend):
        linkage.add()
        linkage.set_search_input(0, "cab")
        row = linkage.remove(0)

        await row.selector.wait_for_search()

        assert not any(call[0] == "list_options" for call in backend.calls)

    @pytest.mark.asyncio
    async def test_rows_search_independently(self, linkage, documents):
        linkage.add()
        linkage.add()
        linkage.set_search_input(0, "engine")
        linkage.set_search_input(1, "cabin")

        await linkage[0].selector.wait_for_search()
        await linkage[1].selector.wait_for_search()

        assert [o.label for o in linkage[0].selector.options] == ["Engine block"]
        assert [o.label for o in linkage[1].selector.options] == ["Cabin assembly"]

    def test_select_sets_document(self, linkage):
        linkage.add()
        linkage.select(0, Option("5", "Cabin assembly"))

        detail = linkage[0].detail
        assert detail.catalog_document_id == "5"
        assert linkage[0].selector.value == "5"

        linkage.select(0, None)
        assert detail.catalog_document_id is None

    def test_update_row(self, linkage):
        linkage.add()
        linkage.update_row(0, detail_name_en="Cab", detail_name_cn="驾驶室")
        assert linkage[0].detail.detail_name_cn == "驾驶室"

        with pytest.raises(KeyError):
            linkage.update_row(0, vin_number="x")

    def test_validate_requires_document(self, linkage):
        linkage.add()
        linkage.add()
        linkage.select(1, Option("5", "Cabin assembly"))

        assert linkage.validate() == {
            "details.0.catalog_document_id": "Catalog document for detail 1 is required",
        }

    def test_load_keeps_order_and_selection(self, linkage):
        linkage.load([
            VinDetail(catalog_document_id="1", detail_name_en="A", catalog_document_label="Cabin assembly"),
            VinDetail(catalog_document_id="2", detail_name_en="B"),
        ])

        assert [row.detail.detail_name_en for row in linkage] == ["A", "B"]
        assert linkage[0].selector.selection.label == "Cabin assembly"
        assert linkage[1].selector.selection.label == "2"
        assert linkage.search_inputs == {}


class TestVinEditor:
    @pytest.mark.asyncio
    async def test_required_fields(self, backend, config):
        editor = VinEditor(backend, config=config)
        editor.linkage.add()

        with pytest.raises(ValidationError) as exc_info:
            await editor.submit()

        assert set(exc_info.value.errors) == {
            "vin_number",
            "product_name_en",
            "product_name_cn",
            "details.0.catalog_document_id",
        }
        editor.close()

    @pytest.mark.asyncio
    async def test_create(self, backend, config, notifier, documents):
        editor = VinEditor(backend, config=config, notifier=notifier)
        editor.set_field("vin_number", " LZZ1BBND8NW123456 ")
        editor.set_field("product_name_en", "Heavy truck")
        editor.set_field("product_name_cn", "重卡")
        editor.linkage.add()
        editor.linkage.select(0, Option(documents[0], "Cabin assembly"))
        editor.linkage.update_row(0, detail_name_en="Cab")

        await editor.submit()

        stored = backend.vins[editor.vin.id]
        assert stored["vin_number"] == "LZZ1BBND8NW123456"
        assert stored["production_name_cn"] == "重卡"
        assert stored["master_pdf"] == [{
            "master_pdf_id": documents[0],
            "detail_name_en": "Cab",
            "detail_name_cn": "",
            "detail_description": "",
        }]
        assert notifier.history[-1].level == NoticeLevel.SUCCESS
        editor.close()

    @pytest.mark.asyncio
    async def test_duplicate_vin_number(self, backend, config):
        backend.add_vin(VinProduct(vin_number="VIN1", product_name_en="A", product_name_cn="甲"))
        editor = VinEditor(backend, config=config)
        editor.set_field("vin_number", "VIN1")
        editor.set_field("product_name_en", "B")
        editor.set_field("product_name_cn", "乙")

        with pytest.raises(SubmissionError, match="already exists"):
            await editor.submit()
        assert "general" in editor.errors

    @pytest.mark.asyncio
    async def test_load_and_update(self, backend, config, documents):
        vin_id = backend.add_vin(VinProduct(
            vin_number="VIN1",
            product_name_en="A",
            product_name_cn="甲",
            details=[VinDetail(catalog_document_id=documents[1], detail_name_en="Engine")],
        ))
        editor = VinEditor(backend, config=config)

        await editor.load(vin_id)
        assert len(editor.linkage) == 1
        assert editor.linkage[0].selector.value == documents[1]

        editor.set_field("description", "Updated")
        await editor.submit()

        assert backend.calls[-1][0] == "update_vin"
        assert backend.vins[vin_id]["production_description"] == "Updated"
        editor.close()

    @pytest.mark.asyncio
    async def test_load_missing(self, backend, config):
        with pytest.raises(NotFoundError):
            await VinEditor(backend, config=config).load("404")


class TestVinManager:
    @pytest.fixture
    def manager(self, backend, config, notifier):
        for number in ("AAA111", "BBB222", "AAA333"):
            backend.add_vin(VinProduct(vin_number=number, product_name_en="Truck"))
        m = VinManager(backend, config=config.vins, notifier=notifier, page_size=2)
        yield m
        m.close()

    @pytest.mark.asyncio
    async def test_pages(self, manager):
        page = await manager.fetch()
        assert [v.vin_number for v in page.items] == ["AAA111", "BBB222"]
        assert page.has_more

    @pytest.mark.asyncio
    async def test_debounced_search(self, manager, backend):
        manager.on_search_input("a")
        manager.on_search_input("aaa")
        await manager.wait_for_search()

        assert [v.vin_number for v in manager.current.items] == ["AAA111", "AAA333"]
        assert [c[2] for c in backend.calls if c[0] == "list_vins"] == ["aaa"]

    @pytest.mark.asyncio
    async def test_delete_refreshes(self, manager, backend, notifier):
        await manager.fetch()
        vin_id = manager.current.items[0].id

        await manager.delete(vin_id)

        assert vin_id not in backend.vins
        assert [v.vin_number for v in manager.current.items] == ["BBB222", "AAA333"]
        assert notifier.history[-1].level == NoticeLevel.SUCCESS

    @pytest.mark.asyncio
    async def test_delete_missing(self, manager):
        with pytest.raises(SubmissionError):
            await manager.delete("404")
