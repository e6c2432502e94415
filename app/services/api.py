# app/services/api.py

import requests


# Default base URL of the MiniBase backend
MINIBASE_URL = "http://localhost:8000"


def _error_message(response, fallback: str) -> str:
    try:
        return response.json().get("error") or fallback
    except ValueError:
        return fallback


def _strip_id(data: dict) -> dict:
    return {key: value for key, value in data.items() if key != "id"}


# -------------------------------
# Query builder
# -------------------------------

class QueryBuilder:
    """
    Accumulates a read query for one table. Nothing is sent until execute().

    Only limit and offset are sent to the server; column selection and the
    eq/neq/gt/lt predicates are recorded but not applied.
    """

    def __init__(self, table_name: str, client: "MiniBaseClient"):
        self.table_name = table_name
        self.client = client
        self.select_columns = "*"
        self.where_conditions = []
        self.limit_value = None
        self.offset_value = None

    def select(self, columns: str = "*"):
        self.select_columns = columns
        return self

    def eq(self, column: str, value):
        self.where_conditions.append({"column": column, "operator": "eq", "value": value})
        return self

    def neq(self, column: str, value):
        self.where_conditions.append({"column": column, "operator": "neq", "value": value})
        return self

    def gt(self, column: str, value):
        self.where_conditions.append({"column": column, "operator": "gt", "value": value})
        return self

    def lt(self, column: str, value):
        self.where_conditions.append({"column": column, "operator": "lt", "value": value})
        return self

    def limit(self, count: int):
        self.limit_value = count
        return self

    def offset(self, count: int):
        self.offset_value = count
        return self

    def build_params(self) -> dict:
        params = {}
        if self.limit_value:
            params["limit"] = self.limit_value
        if self.offset_value:
            params["offset"] = self.offset_value
        return params

    def execute(self) -> dict:
        """
        Fetches one page of records. Returns {data, pagination, error} on
        success and {data: None, error} on failure.
        """
        try:
            response = self.client.request(
                "GET", f"/api/rest/{self.table_name}", params=self.build_params()
            )
            if response.status_code >= 400:
                return {"data": None, "error": _error_message(response, "Request failed")}
            body = response.json()
            return {"data": body["data"], "pagination": body.get("pagination"), "error": None}
        except requests.RequestException as e:
            return {"data": None, "error": str(e)}


# -------------------------------
# Table operations
# -------------------------------

class MiniBaseTable:

    def __init__(self, table_name: str, client: "MiniBaseClient"):
        self.table_name = table_name
        self.client = client

    def select(self, columns: str = "*") -> QueryBuilder:
        return QueryBuilder(self.table_name, self.client).select(columns)

    def _send(self, method: str, endpoint: str, fallback: str, json=None) -> dict:
        try:
            response = self.client.request(method, endpoint, json=json)
            if response.status_code >= 400:
                return {"data": None, "error": _error_message(response, fallback)}
            return {"data": response.json()["data"], "error": None}
        except requests.RequestException as e:
            return {"data": None, "error": str(e)}

    def insert(self, data: dict) -> dict:
        return self._send("POST", f"/api/rest/{self.table_name}", "Insert failed", json=_strip_id(data))

    def update(self, record_id, data: dict) -> dict:
        return self._send(
            "PUT", f"/api/rest/{self.table_name}/{record_id}", "Update failed", json=_strip_id(data)
        )

    def delete(self, record_id) -> dict:
        return self._send("DELETE", f"/api/rest/{self.table_name}/{record_id}", "Delete failed")

    def get_by_id(self, record_id) -> dict:
        return self._send("GET", f"/api/rest/{self.table_name}/{record_id}", "Record not found")


# -------------------------------
# Authentication
# -------------------------------

class MiniBaseAuth:

    def __init__(self, client: "MiniBaseClient"):
        self.client = client

    def sign_in(self, username: str, password: str) -> dict:
        """
        Logs in and keeps the returned token on the client for later calls.
        """
        try:
            response = self.client.request(
                "POST", "/api/auth/login", json={"username": username, "password": password}
            )
            if response.status_code >= 400:
                return {"data": None, "error": _error_message(response, "Authentication failed")}
            data = response.json()["data"]
            self.client.set_api_key(data["token"])
            return {"data": data, "error": None}
        except requests.RequestException as e:
            return {"data": None, "error": str(e)}

    def sign_out(self) -> dict:
        # Tokens are stateless; forgetting it is all logout means.
        self.client.set_api_key(None)
        return {"error": None}

    def get_session(self) -> dict:
        if not self.client.api_key:
            return {"data": None, "error": "No active session"}
        try:
            response = self.client.request("GET", "/api/auth/verify")
            if response.status_code >= 400:
                self.client.set_api_key(None)
                return {"data": None, "error": "Invalid session"}
            user = response.json()["data"]["user"]
            return {"data": {"token": self.client.api_key, "user": user}, "error": None}
        except requests.RequestException as e:
            return {"data": None, "error": str(e)}


# -------------------------------
# Client
# -------------------------------

class MiniBaseClient:

    def __init__(self, url: str = MINIBASE_URL, api_key: str | None = None, session=None):
        self.base_url = url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.auth = MiniBaseAuth(self)

    def set_api_key(self, api_key: str | None):
        self.api_key = api_key

    def from_(self, table_name: str) -> MiniBaseTable:
        return MiniBaseTable(table_name, self)

    table = from_

    def request(self, method: str, endpoint: str, json=None, params=None):
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        return self.session.request(
            method,
            self.base_url + endpoint,
            json=json if method in ("POST", "PUT") else None,
            params=params or None,
            headers=headers,
        )

    def sql(self, query: str, params=None) -> dict:
        """
        Executes raw SQL on the server (administrators only).
        """
        try:
            response = self.request(
                "POST", "/api/database/sql", json={"query": query, "params": params or []}
            )
            if response.status_code >= 400:
                return {"data": None, "error": _error_message(response, "SQL execution failed")}
            return {"data": response.json()["data"], "error": None}
        except requests.RequestException as e:
            return {"data": None, "error": str(e)}


def create_client(url: str, api_key: str | None = None, session=None) -> MiniBaseClient:
    return MiniBaseClient(url, api_key=api_key, session=session)
