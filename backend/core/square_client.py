import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

import requests

from core.config import settings
from core.errors import SquareApiError, SquareConfigError
from core.pagination import chunked, collect_pages
from core.retry import RequestThrottle, retry_with_backoff

logger = logging.getLogger(__name__)

CATALOG_TYPES = {
    "ITEM": "ITEM",
    "ITEM_VARIATION": "ITEM_VARIATION",
    "CATEGORY": "CATEGORY",
    "IMAGE": "IMAGE",
    "MEASUREMENT_UNIT": "MEASUREMENT_UNIT",
}

INVENTORY_STATES = {
    "NONE": "NONE",
    "IN_STOCK": "IN_STOCK",
    "SOLD": "SOLD",
    "WASTE": "WASTE",
    "UNLINKED_RETURN": "UNLINKED_RETURN",
}

DEFAULT_CATALOG_LIST_TYPES = ("ITEM", "CATEGORY", "IMAGE", "MEASUREMENT_UNIT")


class SquareClient:
    """
    Thin wrapper around the Square REST API (v2).

    Every call is throttled and retried on 429 with exponential backoff.
    List endpoints are followed to the last cursor and returned as one list.
    """

    def __init__(
        self,
        base_url: str = settings.square_api_url,
        access_token: Optional[str] = settings.square_access_token,
        square_version: str = settings.square_version,
        location_id: str = settings.square_location_id,
        timeout: float = settings.square_timeout,
        max_retries: int = settings.square_max_retries,
        retry_delay: float = settings.square_retry_delay,
        page_delay: float = settings.square_page_delay,
        batch_size: int = settings.square_batch_size,
        throttle: Optional[RequestThrottle] = None,
        session: Optional[requests.Session] = None,
        sleep=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.square_version = square_version
        self.location_id = location_id
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.page_delay = page_delay
        self.batch_size = batch_size
        self.throttle = throttle or RequestThrottle(settings.square_max_requests_per_second)
        self.session = session or requests.Session()
        self._sleep = sleep

    def _headers(self) -> Dict[str, str]:
        if not self.access_token:
            raise SquareConfigError("SQUARE_ACCESS_TOKEN is not configured")
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.access_token}",
            "Square-Version": self.square_version,
        }

    def _send(self, method: str, path: str, *, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}/{path.lstrip('/')}"
        self.throttle.wait()
        resp = self.session.request(
            method,
            url,
            json=json,
            params=params,
            headers=self._headers(),
            timeout=self.timeout,
        )

        if resp.status_code >= 400:
            try:
                body = resp.json()
            except ValueError:
                body = {}
            errors = body.get("errors") if isinstance(body, dict) else None
            raise SquareApiError(resp.status_code, errors, None if errors else (resp.text or None))

        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    def _request(self, method: str, path: str, *, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return retry_with_backoff(
            lambda: self._send(method, path, json=json, params=params),
            retries=self.max_retries,
            initial_delay=self.retry_delay,
            **kwargs,
        )

    def _collect(self, fetch_page, result_key: str) -> List[Any]:
        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return collect_pages(fetch_page, result_key, page_delay=self.page_delay, **kwargs)

    # ----------------------------
    # Catalog
    # ----------------------------

    def list_catalog(self, types: Iterable[str] = DEFAULT_CATALOG_LIST_TYPES) -> List[Dict[str, Any]]:
        type_param = ",".join(types)

        def fetch(cursor: Optional[str]) -> Dict[str, Any]:
            params = {"types": type_param}
            if cursor:
                params["cursor"] = cursor
            return self._request("GET", "/catalog/list", params=params)

        objects = self._collect(fetch, "objects")
        logger.info("Listed %d catalog objects (types=%s)", len(objects), type_param)
        return objects

    def batch_retrieve_objects(self, object_ids: List[str], include_related: bool = False) -> Dict[str, List[Dict[str, Any]]]:
        objects: List[Dict[str, Any]] = []
        related: List[Dict[str, Any]] = []
        for batch in chunked(list(object_ids), self.batch_size):
            data = self._request(
                "POST",
                "/catalog/batch-retrieve",
                json={"object_ids": batch, "include_related_objects": include_related},
            )
            objects.extend(data.get("objects") or [])
            related.extend(data.get("related_objects") or [])
        return {"objects": objects, "related_objects": related}

    def retrieve_object(self, object_id: str, include_related: bool = True) -> Dict[str, Any]:
        data = self._request(
            "GET",
            f"/catalog/object/{object_id}",
            params={"include_related_objects": "true" if include_related else "false"},
        )
        return {"object": data.get("object"), "related_objects": data.get("related_objects") or []}

    def upsert_object(self, catalog_object: Dict[str, Any], idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        data = self._request(
            "POST",
            "/catalog/object",
            json={
                "idempotency_key": idempotency_key or str(uuid.uuid4()),
                "object": catalog_object,
            },
        )
        return {"object": data.get("catalog_object"), "id_mappings": data.get("id_mappings") or []}

    def delete_object(self, object_id: str) -> List[str]:
        data = self._request("DELETE", f"/catalog/object/{object_id}")
        return data.get("deleted_object_ids") or []

    # ----------------------------
    # Inventory
    # ----------------------------

    def batch_retrieve_inventory_counts(
        self,
        variation_ids: List[str],
        location_ids: Optional[List[str]] = None,
        states: Iterable[str] = (INVENTORY_STATES["IN_STOCK"],),
    ) -> List[Dict[str, Any]]:
        counts: List[Dict[str, Any]] = []
        for batch in chunked(list(variation_ids), self.batch_size):
            body: Dict[str, Any] = {"catalog_object_ids": batch, "states": list(states)}
            if location_ids:
                body["location_ids"] = list(location_ids)

            def fetch(cursor: Optional[str], body=body) -> Dict[str, Any]:
                payload = dict(body)
                if cursor:
                    payload["cursor"] = cursor
                return self._request("POST", "/inventory/counts/batch-retrieve", json=payload)

            counts.extend(self._collect(fetch, "counts"))
        return counts

    def retrieve_inventory_count(self, variation_id: str, location_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        params = {"location_ids": ",".join(location_ids)} if location_ids else None
        data = self._request("GET", f"/inventory/{variation_id}", params=params)
        return data.get("counts") or []

    def batch_change_inventory(self, changes: List[Dict[str, Any]], idempotency_key: Optional[str] = None) -> List[Dict[str, Any]]:
        data = self._request(
            "POST",
            "/inventory/changes/batch-create",
            json={
                "idempotency_key": idempotency_key or str(uuid.uuid4()),
                "changes": changes,
                "ignore_unchanged_counts": True,
            },
        )
        return data.get("counts") or []

    # ----------------------------
    # Vendors
    # ----------------------------

    def search_vendors(self, statuses: Iterable[str] = ("ACTIVE",)) -> List[Dict[str, Any]]:
        status_list = list(statuses)

        def fetch(cursor: Optional[str]) -> Dict[str, Any]:
            body: Dict[str, Any] = {"filter": {"status": status_list}}
            if cursor:
                body["cursor"] = cursor
            return self._request("POST", "/vendors/search", json=body)

        return self._collect(fetch, "vendors")

    def retrieve_vendor(self, vendor_id: str) -> Optional[Dict[str, Any]]:
        data = self._request("GET", f"/vendors/{vendor_id}")
        return data.get("vendor")

    def bulk_retrieve_vendors(self, vendor_ids: List[str]) -> Dict[str, Dict[str, Any]]:
        """Returns vendor objects keyed by id; ids Square couldn't resolve are left out."""
        out: Dict[str, Dict[str, Any]] = {}
        for batch in chunked(list(vendor_ids), self.batch_size):
            data = self._request("POST", "/vendors/bulk-retrieve", json={"vendor_ids": batch})
            for vendor_id, entry in (data.get("responses") or {}).items():
                vendor = (entry or {}).get("vendor")
                if vendor:
                    out[vendor_id] = vendor
        return out

    # ----------------------------
    # Locations
    # ----------------------------

    def list_locations(self) -> List[Dict[str, Any]]:
        data = self._request("GET", "/locations")
        return data.get("locations") or []


square_client = SquareClient()


def get_square_client() -> SquareClient:
    return square_client
