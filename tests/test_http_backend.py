"""Tests for the httpx catalogue backend, against a mock transport."""

import json

import httpx
import pytest

from epc_catalog.backends.http import HttpCatalogBackend
from epc_catalog.config import ServiceConfig
from epc_catalog.documents.payload import build_document_payload
from epc_catalog.documents.types import ImageUpload, PartItem
from epc_catalog.errors import NotFoundError, RemoteFetchError, SubmissionError
from epc_catalog.options.mapping import OptionKind
from epc_catalog.selectors.graph import HierarchyFlow
from epc_catalog.vins.types import VinDetail, VinProduct


class Recorder:
    """Mock transport handler answering from a route table."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"success": False, "message": "Not found"})
        status, body = self.routes[key]
        return httpx.Response(status, json=body)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_backend(routes, token="secret"):
    recorder = Recorder(routes)
    backend = HttpCatalogBackend(
        ServiceConfig(base_url="http://epc.test/api", api_token=token, timeout=5),
        transport=httpx.MockTransport(recorder),
    )
    return backend, recorder


def list_response(items, page=1, limit=10, total=None, total_pages=1):
    return {
        "success": True,
        "message": "ok",
        "data": {
            "items": items,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": len(items) if total is None else total,
                "totalPages": total_pages,
            },
        },
    }


class TestListOptions:
    @pytest.mark.asyncio
    async def test_request_body_and_parsing(self):
        routes = {
            ("POST", "/api/catalogs/category/get"): (200, list_response(
                [{"category_id": 4, "category_name_en": "Body", "category_name_cn": "车身"}],
                total=12,
                total_pages=2,
            )),
        }
        backend, recorder = make_backend(routes)
        async with backend:
            page = await backend.list_options(OptionKind.CATEGORY, 1, 10, search="bo", parent_id="m1")

        body = json.loads(recorder.last.content)
        assert body == {
            "page": 1,
            "limit": 10,
            "search": "bo",
            "sort_order": "desc",
            "master_category_id": "m1",
        }
        assert [(o.id, o.label) for o in page.items] == [("4", "Body - 车身")]
        assert page.items[0].kind == "category"
        assert page.has_more
        assert page.total == 12

    @pytest.mark.asyncio
    async def test_last_page(self):
        routes = {
            ("POST", "/api/catalogs/master-category/get"): (200, list_response(
                [{"master_category_id": "m1", "master_category_name_en": "Truck"}],
                page=2,
                total=11,
                total_pages=2,
            )),
        }
        backend, _ = make_backend(routes)
        async with backend:
            page = await backend.list_options(OptionKind.MASTER_CATEGORY, 2, 10)
        assert not page.has_more

    @pytest.mark.asyncio
    async def test_part_kind_resource_without_parent_filter(self):
        routes = {
            ("POST", "/api/catalogs/steering/get"): (200, list_response([
                {
                    "steering_id": "s1",
                    "steering_name_en": "Power",
                    "type_steerings": [{"type_steering_id": "ts1", "type_steering_name_en": "Left"}],
                },
            ])),
        }
        backend, recorder = make_backend(routes)
        async with backend:
            page = await backend.list_options(OptionKind.STEERING, 1, 10, parent_id="steering")

        assert set(json.loads(recorder.last.content)) == {"page", "limit", "search", "sort_order"}
        assert page.items[0].data["type_steerings"][0]["type_steering_id"] == "ts1"

    @pytest.mark.asyncio
    async def test_auth_header(self):
        routes = {("POST", "/api/catalogs/master-category/get"): (200, list_response([]))}
        backend, recorder = make_backend(routes, token="abc")
        async with backend:
            await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)
        assert recorder.last.headers["Authorization"] == "Bearer abc"

    @pytest.mark.asyncio
    async def test_no_auth_header_without_token(self):
        routes = {("POST", "/api/catalogs/master-category/get"): (200, list_response([]))}
        backend, recorder = make_backend(routes, token=None)
        async with backend:
            await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)
        assert "Authorization" not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_server_error(self):
        routes = {("POST", "/api/catalogs/master-category/get"): (500, {"message": "boom"})}
        backend, _ = make_backend(routes)
        async with backend:
            with pytest.raises(RemoteFetchError) as exc_info:
                await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)
        assert exc_info.value.kind == "master_category"

    @pytest.mark.asyncio
    async def test_unsuccessful_envelope(self):
        routes = {
            ("POST", "/api/catalogs/master-category/get"): (200, {"success": False, "message": "Token expired"}),
        }
        backend, _ = make_backend(routes)
        async with backend:
            with pytest.raises(RemoteFetchError, match="Token expired"):
                await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def broken(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend = HttpCatalogBackend(
            ServiceConfig(base_url="http://epc.test/api", api_token=None, timeout=5),
            transport=httpx.MockTransport(broken),
        )
        async with backend:
            with pytest.raises(RemoteFetchError, match="connection refused"):
                await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)


class TestDocuments:
    @pytest.mark.asyncio
    async def test_list_with_top_level_pagination(self):
        routes = {
            ("POST", "/api/catalogs/all-item-catalogs/get"): (200, {
                "success": True,
                "data": [{"master_pdf_id": 7, "name_pdf": "Cabin assembly"}],
                "pagination": {"current_page": 1, "total_pages": 3, "has_next_page": True},
            }),
        }
        backend, _ = make_backend(routes)
        async with backend:
            page = await backend.list_documents(1, 10)

        assert page.items[0].id == "7"
        assert page.items[0].name == "Cabin assembly"
        assert page.total_pages == 3
        assert page.has_more

    @pytest.mark.asyncio
    async def test_get_document(self):
        routes = {
            ("GET", "/api/catalogs/all-item-catalogs/7"): (200, {
                "success": True,
                "data": {
                    "master_pdf_id": 7,
                    "dokumen_name": "Cabin assembly",
                    "master_category_id": 1,
                    "master_category_name_en": "Truck",
                    "category_id": 4,
                    "type_category_id": 9,
                    "data_items": [{
                        "catalog_item_id": 70,
                        "target_id": "p1",
                        "part_number": "PN1",
                        "catalog_item_name_en": "Bolt",
                        "catalog_item_name_ch": "螺栓",
                        "quantity": 3,
                    }],
                },
            }),
        }
        backend, _ = make_backend(routes)
        async with backend:
            document = await backend.get_document("7")

        assert document.hierarchy()["category_id"] == "4"
        assert document.labels["master_category_id"] == "Truck"
        assert document.items[0].id == "70"
        assert document.items[0].quantity == 3

    @pytest.mark.asyncio
    async def test_get_missing_document(self):
        backend, _ = make_backend({})
        async with backend:
            with pytest.raises(NotFoundError):
                await backend.get_document("404")

    @pytest.mark.asyncio
    async def test_create_sends_multipart(self):
        routes = {
            ("POST", "/api/catalogs/all-item-catalogs/create"): (201, {
                "success": True,
                "message": "Catalog created successfully",
                "data": {"master_pdf_id": 8},
            }),
        }
        payload = build_document_payload(
            name="Cabin assembly",
            flow=HierarchyFlow.GENERIC,
            hierarchy={"master_category_id": "1", "category_id": "4", "type_category_id": "9"},
            items=[PartItem(id="x", target_id="p1", part_number="PN1", name_en="Bolt", name_cn="螺栓")],
            image=ImageUpload("cabin.png", b"\x89PNG", "image/png"),
        )
        backend, recorder = make_backend(routes)
        async with backend:
            result = await backend.create_document(payload)

        assert result.success
        assert result.data == {"master_pdf_id": 8}
        request = recorder.last
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="dokumen_name"' in request.content
        assert b'filename="cabin.png"' in request.content
        assert "螺栓".encode("utf-8") in request.content

    @pytest.mark.asyncio
    async def test_create_without_image_is_still_multipart(self):
        routes = {
            ("POST", "/api/catalogs/all-item-catalogs/create"): (201, {"success": True, "data": {"master_pdf_id": 9}}),
            ("PUT", "/api/catalogs/all-item-catalogs/9"): (200, {"success": True}),
        }
        payload = build_document_payload(
            name="Door panel",
            flow=HierarchyFlow.GENERIC,
            hierarchy={"master_category_id": "1", "category_id": "4", "type_category_id": "9"},
            items=[PartItem(id="x", target_id="p1", part_number="PN1", name_en="Bolt", name_cn="螺栓")],
        )
        backend, recorder = make_backend(routes)
        async with backend:
            await backend.create_document(payload)
            create = recorder.last
            await backend.update_document("9", payload)
            update = recorder.last

        for request in (create, update):
            assert request.headers["Content-Type"].startswith("multipart/form-data")
            assert b'name="file_foto"' in request.content
            assert b"filename=" not in request.content
            assert b'name="data_items"' in request.content

    @pytest.mark.asyncio
    async def test_rejection_is_a_failed_result(self):
        routes = {
            ("POST", "/api/catalogs/all-item-catalogs/create"): (400, {
                "success": False,
                "message": "Kombinasi dokumen_name, master_category_id, category_id, dan type_category_id sudah ada",
            }),
        }
        payload = build_document_payload("Doc", HierarchyFlow.GENERIC, {}, [])
        backend, _ = make_backend(routes)
        async with backend:
            result = await backend.create_document(payload)

        assert not result.success
        assert result.message.startswith("Kombinasi")

    @pytest.mark.asyncio
    async def test_unreachable_service_raises(self):
        def broken(request):
            raise httpx.ReadTimeout("timed out", request=request)

        backend = HttpCatalogBackend(
            ServiceConfig(base_url="http://epc.test/api", api_token=None, timeout=5),
            transport=httpx.MockTransport(broken),
        )
        payload = build_document_payload("Doc", HierarchyFlow.GENERIC, {}, [])
        async with backend:
            with pytest.raises(SubmissionError, match="timed out"):
                await backend.create_document(payload)

    @pytest.mark.asyncio
    async def test_rename_delete_duplicate(self):
        ok = (200, {"success": True, "message": "ok"})
        routes = {
            ("PUT", "/api/catalogs/all-item-catalogs/7/rename"): ok,
            ("DELETE", "/api/catalogs/all-item-catalogs/7"): ok,
            ("DELETE", "/api/catalogs/all-item-catalogs/items/70"): ok,
            ("POST", "/api/catalogs/all-item-catalogs/7/duplicate"): ok,
        }
        backend, recorder = make_backend(routes)
        async with backend:
            assert (await backend.rename_document("7", "New name")).success
            assert json.loads(recorder.last.content) == {"dokumen_name": "New name"}
            assert (await backend.delete_document("7")).success
            assert (await backend.delete_document_item("70")).success
            assert (await backend.duplicate_document("7")).success


class TestVins:
    @pytest.mark.asyncio
    async def test_create_vin_payload(self):
        routes = {("POST", "/api/catalogs/vins/create"): (201, {"success": True, "data": {"production_id": 3}})}
        vin = VinProduct(
            vin_number="VIN1",
            product_name_en="Truck",
            product_name_cn="卡车",
            details=[VinDetail(catalog_document_id="7", detail_name_en="Cab")],
        )
        backend, recorder = make_backend(routes)
        async with backend:
            result = await backend.create_vin(vin)

        assert result.success
        body = json.loads(recorder.last.content)
        assert body["production_name_en"] == "Truck"
        assert body["master_pdf"][0]["master_pdf_id"] == "7"

    @pytest.mark.asyncio
    async def test_get_and_list_vins(self):
        record = {
            "production_id": 3,
            "vin_number": "VIN1",
            "production_name_en": "Truck",
            "master_pdf": [{"master_pdf_id": 7, "detail_name_en": "Cab", "name_pdf": "Cabin assembly"}],
        }
        routes = {
            ("GET", "/api/catalogs/vins/3"): (200, {"success": True, "data": record}),
            ("POST", "/api/catalogs/vins/get"): (200, list_response([record], total_pages=1)),
        }
        backend, _ = make_backend(routes)
        async with backend:
            vin = await backend.get_vin("3")
            page = await backend.list_vins(1, 5, search="VIN")

        assert vin.id == "3"
        assert vin.details[0].catalog_document_id == "7"
        assert vin.details[0].catalog_document_label == "Cabin assembly"
        assert page.items[0].vin_number == "VIN1"
        assert not page.has_more
