# finance_tracker/records.py
"""Record list controllers for incomes, expenses and categories.

One controller instance owns the in-memory collection for a record kind.
Mutations are applied to that collection only after the server confirms them
and are never followed by a refetch.
"""

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from .errors import AffectedRowsError, ApiError, ValidationError
from .guard import ActionGuard
from .pagination import Paginator

logger = logging.getLogger("finance-tracker.records")

CATEGORY_OPTIONS_PATH = "/getcategoriesdropdownbyuser"
UNKNOWN_CATEGORY = "Unknown"


# ---------------- Field validation ----------------
def _positive_amount(fields, key):
    value = fields.get(key)
    if isinstance(value, bool) or value is None or value == "":
        raise ValidationError("Amount must be positive")
    if not isinstance(value, (int, float)):
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ValidationError("Amount must be a number")
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Amount must be positive")
    return value


def validate_income(fields):
    return {"income_amt": _positive_amount(fields, "income_amt")}


def validate_expense(fields):
    amount = _positive_amount(fields, "expense_amt")
    category_id = fields.get("category_id")
    if category_id is None or not str(category_id).strip():
        raise ValidationError("Please select a category")
    return {"expense_amt": amount, "category_id": str(category_id)}


def validate_category(fields):
    name = fields.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Category name cannot be empty")
    return {"name": name}


def _today():
    return date.today().isoformat()


def _resolve_category(category_id, options):
    for cat in options:
        if str(cat.get("id")) == category_id:
            return {"id": cat.get("id"), "name": cat.get("name")}
    return None


# ---------------- Local entry builders ----------------
def _new_income(record_id, values, options):
    return {"id": record_id, "income_amt": values["income_amt"], "created_date": _today()}


def _new_expense(record_id, values, options):
    category = _resolve_category(values["category_id"], options) or {
        "id": values["category_id"],
        "name": UNKNOWN_CATEGORY,
    }
    return {
        "id": record_id,
        "expense_amt": values["expense_amt"],
        "created_date": _today(),
        "category": category,
    }


def _new_category(record_id, values, options):
    return {"id": record_id, "name": values["name"]}


def _patch_income(entry, values, options):
    return {**entry, "income_amt": values["income_amt"]}


def _patch_expense(entry, values, options):
    category = _resolve_category(values["category_id"], options) or entry.get("category")
    return {**entry, "expense_amt": values["expense_amt"], "category": category}


def _patch_category(entry, values, options):
    return {**entry, "name": values["name"]}


@dataclass(frozen=True)
class RecordKind:
    """Wire contract and local shape of one record type."""

    name: str
    plural: str
    list_path: str
    list_key: str
    add_path: str
    update_path: str
    update_key: str
    delete_path: str
    delete_key: str
    validate: Callable[[Dict[str, Any]], Dict[str, Any]]
    new_entry: Callable[[str, Dict[str, Any], List[dict]], dict]
    patch_entry: Callable[[dict, Dict[str, Any], List[dict]], dict]


CATEGORY = RecordKind(
    name="category",
    plural="categories",
    list_path="/getcategories",
    list_key="categories",
    add_path="/addcategory",
    update_path="/updatecategory",
    update_key="update_categories",
    delete_path="/deletecategory",
    delete_key="delete_categories",
    validate=validate_category,
    new_entry=_new_category,
    patch_entry=_patch_category,
)

INCOME = RecordKind(
    name="income",
    plural="incomes",
    list_path="/getincomes",
    list_key="income",
    add_path="/addincome",
    update_path="/updateincome",
    update_key="update_income",
    delete_path="/deleteincome",
    delete_key="delete_incomes",
    validate=validate_income,
    new_entry=_new_income,
    patch_entry=_patch_income,
)

EXPENSE = RecordKind(
    name="expense",
    plural="expenses",
    list_path="/getuserexpenseswithcategory",
    list_key="expense",
    add_path="/addexpense",
    update_path="/updateexpense",
    update_key="update_expense",
    delete_path="/deleteexpense",
    delete_key="delete_expense",
    validate=validate_expense,
    new_entry=_new_expense,
    patch_entry=_patch_expense,
)


def require_single_row(payload, key):
    """Raise unless ``payload[key].affected_rows`` is exactly 1"""
    node = payload.get(key)
    affected = node.get("affected_rows") if isinstance(node, dict) else None
    if isinstance(affected, bool) or affected != 1:
        raise AffectedRowsError(affected, payload=payload)


# ---------------- Controllers ----------------
class RecordListController:
    def __init__(self, client, kind: RecordKind, auth, paginator: Optional[Paginator] = None):
        self.client = client
        self.kind = kind
        self.auth = auth
        self.paginator = paginator or Paginator()
        self.records: List[dict] = []
        self._guard = ActionGuard()

    # ---------------- State ----------------
    @property
    def is_loading(self):
        return self._guard.busy

    @property
    def total_pages(self):
        return self.paginator.total_pages(len(self.records))

    @property
    def current_page(self):
        return self.paginator.current_page

    def go_to_page(self, page):
        return self.paginator.go_to(page, len(self.records))

    def page_items(self):
        return self.paginator.page_slice(self.records)

    def category_options(self):
        return []

    # ---------------- Operations ----------------
    def refresh(self):
        """Reload for whoever is currently logged in"""
        return self.load(self.auth.owner_id)

    def load(self, owner_id):
        """Replace the local collection with the server's list for ``owner_id``"""
        if not owner_id:
            self.records = []
            return self.records

        with self._guard.claim((self.kind.name, "load")):
            payload = self.client.get(
                self.kind.list_path,
                {"user_id": owner_id},
                fallback=f"Failed to fetch {self.kind.plural}",
            )
        rows = payload.get(self.kind.list_key) or []
        self.records = [dict(row) for row in rows]
        self.paginator.current_page = 1
        logger.debug(f"Loaded {len(self.records)} {self.kind.plural} for user {owner_id}")
        return self.records

    def add(self, fields):
        owner_id = self.auth.owner_id
        if not owner_id:
            raise ValidationError(f"Please login to add {self.kind.plural}")
        values = self.kind.validate(fields)

        with self._guard.claim((self.kind.name, "add")):
            payload = self.client.post(
                self.kind.add_path,
                {**values, "user_id": owner_id},
                fallback=f"Failed to add {self.kind.name}",
            )

        record_id = payload.get("id")
        if record_id is None or record_id == "":
            record_id = uuid.uuid4().hex
            logger.warning(f"Server returned no id for new {self.kind.name}; using {record_id}")
        entry = self.kind.new_entry(str(record_id), values, self.category_options())
        self.records.append(entry)
        logger.info(f"Added {self.kind.name} {entry['id']} for user {owner_id}")
        return entry

    def update(self, record_id, fields):
        owner_id = self.auth.owner_id
        if not owner_id or not record_id:
            raise ValidationError(f"Invalid user or {self.kind.name}")
        values = self.kind.validate(fields)

        with self._guard.claim((self.kind.name, "update")):
            payload = self.client.post(
                self.kind.update_path,
                {"id": record_id, "user_id": owner_id, **values},
                fallback=f"Failed to update {self.kind.name}",
            )
        self._check_affected(payload, self.kind.update_key, "update", record_id)

        patched = None
        for i, entry in enumerate(self.records):
            if str(entry.get("id")) == str(record_id):
                patched = self.kind.patch_entry(entry, values, self.category_options())
                self.records[i] = patched
        logger.info(f"Updated {self.kind.name} {record_id} for user {owner_id}")
        return patched

    def remove(self, record_id):
        owner_id = self.auth.owner_id
        if not owner_id or not record_id:
            raise ValidationError(f"Please login to delete {self.kind.plural}")

        with self._guard.claim((self.kind.name, "delete")):
            payload = self.client.delete(
                self.kind.delete_path,
                {"id": record_id, "user_id": owner_id},
                fallback=f"Failed to delete {self.kind.name}",
            )
        self._check_affected(payload, self.kind.delete_key, "delete", record_id)

        self.records = [r for r in self.records if str(r.get("id")) != str(record_id)]
        self.paginator.clamp(len(self.records))
        logger.info(f"Deleted {self.kind.name} {record_id} for user {owner_id}")

    def _check_affected(self, payload, key, action, record_id):
        try:
            require_single_row(payload, key)
        except AffectedRowsError as e:
            logger.error(f"{action} {self.kind.name} {record_id}: affected_rows={e.affected_rows}")
            raise


class CategoryListController(RecordListController):
    def __init__(self, client, auth, paginator=None):
        super().__init__(client, CATEGORY, auth, paginator)


class IncomeListController(RecordListController):
    def __init__(self, client, auth, paginator=None):
        super().__init__(client, INCOME, auth, paginator)


class ExpenseListController(RecordListController):
    """Expenses also keep the user's categories for the form's dropdown."""

    def __init__(self, client, auth, paginator=None):
        super().__init__(client, EXPENSE, auth, paginator)
        self.categories: List[dict] = []

    def category_options(self):
        return self.categories

    @property
    def default_category_id(self):
        return self.categories[0].get("id") if self.categories else None

    def load_categories(self, owner_id):
        if not owner_id:
            self.categories = []
            return self.categories

        with self._guard.claim((self.kind.name, "load_categories")):
            payload = self.client.get(
                CATEGORY_OPTIONS_PATH, {"user_id": owner_id}, fallback="Failed to fetch categories"
            )
        self.categories = [dict(row) for row in payload.get("categories") or []]
        return self.categories

    def refresh(self):
        """Reload categories and expenses; a category failure does not block expenses"""
        owner_id = self.auth.owner_id
        error = None
        try:
            self.load_categories(owner_id)
        except ApiError as e:
            error = e
        records = self.load(owner_id)
        if error is not None:
            raise error
        return records
