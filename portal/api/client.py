"""HTTP gateway to the remote LMS API.

One method per remote operation, grouped by resource. Every request:
- attaches the session's bearer token when present
- serializes the JSON body when one is given
- raises ``ApiError`` carrying the server-supplied message on non-2xx

There is no retry, no timeout policy of our own and no cancellation; failures
propagate directly to the caller.
"""

from typing import Any

import httpx
import structlog

from portal.api.errors import GENERIC_ERROR_MESSAGE, ApiError
from portal.api.session import AuthSession


logger = structlog.get_logger(__name__)

JSON = Any


def _error_message(response: httpx.Response) -> str:
    """Best-effort server message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return GENERIC_ERROR_MESSAGE


class ApiClient:
    """Async client for the remote API, bound to one ``AuthSession``."""

    def __init__(
        self,
        base_url: str,
        session: AuthSession | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Remote API base URL (e.g. ``http://localhost:3001/api``).
            session: Token slot used for the ``Authorization`` header.
            http_client: Shared ``httpx.AsyncClient``; not closed by ``aclose``.
            transport: Transport for a client created here (tests use
                ``httpx.MockTransport``).
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or AuthSession()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(transport=transport)

        self.auth = AuthResource(self)
        self.profiles = ProfilesResource(self)
        self.courses = CoursesResource(self)
        self.modules = ModulesResource(self)
        self.lessons = LessonsResource(self)
        self.quizzes = QuizzesResource(self)
        self.enrollments = EnrollmentsResource(self)
        self.progress = ProgressResource(self)
        self.certificates = CertificatesResource(self)
        self.groups = GroupsResource(self)
        self.faqs = FaqsResource(self)
        self.settings = SettingsResource(self)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def request(
        self,
        method: str,
        endpoint: str,
        body: JSON | None = None,
        params: dict[str, str] | None = None,
    ) -> JSON:
        """Send one request and return the decoded JSON response.

        Raises:
            ApiError: On any non-2xx status.
            httpx.RequestError: On transport failure.
        """
        headers = {"Content-Type": "application/json"}
        headers.update(self.session.authorization_header())

        response = await self._http.request(
            method,
            f"{self.base_url}{endpoint}",
            headers=headers,
            json=body,
            params=params,
        )

        if not response.is_success:
            message = _error_message(response)
            logger.info(
                "api_request_failed",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                error=message,
            )
            raise ApiError(message, response.status_code)

        if not response.content:
            return None
        return response.json()

    async def get(self, endpoint: str) -> JSON:
        return await self.request("GET", endpoint)

    async def post(self, endpoint: str, body: JSON | None = None) -> JSON:
        return await self.request("POST", endpoint, body)

    async def put(self, endpoint: str, body: JSON | None = None) -> JSON:
        return await self.request("PUT", endpoint, body)

    async def delete(self, endpoint: str) -> JSON:
        return await self.request("DELETE", endpoint)


class _Resource:
    def __init__(self, client: ApiClient) -> None:
        self._client = client


class AuthResource(_Resource):
    async def login(
        self,
        email: str,
        password: str,
        *,
        cpf: str | None = None,
        cnpj: str | None = None,
        user_type: str | None = None,
    ) -> JSON:
        """Returns ``user``/``token``, or ``requiresMfa``/``mfaToken``."""
        body: dict[str, Any] = {"email": email, "password": password}
        if cpf:
            body["cpf"] = cpf
        if cnpj:
            body["cnpj"] = cnpj
        if user_type:
            body["userType"] = user_type
        return await self._client.post("/auth/login", body)

    async def register(self, data: dict[str, Any]) -> JSON:
        return await self._client.post("/auth/register", data)

    async def me(self) -> JSON:
        return await self._client.get("/auth/me")

    async def mfa_verify(self, mfa_token: str, code: str) -> JSON:
        return await self._client.post(
            "/auth/mfa/verify", {"mfaToken": mfa_token, "code": code}
        )

    async def mfa_setup(self) -> JSON:
        return await self._client.post("/auth/mfa/setup")

    async def mfa_enable(self, code: str) -> JSON:
        return await self._client.post("/auth/mfa/enable", {"code": code})

    async def mfa_disable(self) -> JSON:
        return await self._client.post("/auth/mfa/disable")

    async def mfa_status(self) -> JSON:
        return await self._client.get("/auth/mfa/status")

    async def forgot_password(self, email: str) -> JSON:
        return await self._client.post("/auth/forgot-password", {"email": email})

    async def reset_password(self, token: str, new_password: str) -> JSON:
        return await self._client.post(
            "/auth/reset-password", {"token": token, "newPassword": new_password}
        )

    async def update_password(self, new_password: str) -> JSON:
        return await self._client.post(
            "/auth/update-password", {"newPassword": new_password}
        )


class ProfilesResource(_Resource):
    async def me(self) -> JSON:
        return await self._client.get("/profiles/me")

    async def update(self, data: dict[str, Any]) -> JSON:
        return await self._client.put("/profiles/me", data)

    async def get_all(self) -> JSON:
        return await self._client.get("/profiles")

    async def get_by_id(self, profile_id: str) -> JSON:
        return await self._client.get(f"/profiles/{profile_id}")


class CoursesResource(_Resource):
    async def get_all(self) -> JSON:
        return await self._client.get("/courses")

    async def get_by_id(self, course_id: str) -> JSON:
        return await self._client.get(f"/courses/{course_id}")

    async def create(self, data: dict[str, Any]) -> JSON:
        return await self._client.post("/courses", data)

    async def update(self, course_id: str, data: dict[str, Any]) -> JSON:
        return await self._client.put(f"/courses/{course_id}", data)

    async def delete(self, course_id: str) -> JSON:
        return await self._client.delete(f"/courses/{course_id}")


class ModulesResource(_Resource):
    async def get_by_course(self, course_id: str) -> JSON:
        return await self._client.get(f"/modules/course/{course_id}")

    async def get_by_id(self, module_id: str) -> JSON:
        return await self._client.get(f"/modules/{module_id}")


class LessonsResource(_Resource):
    async def get_by_module(self, module_id: str) -> JSON:
        return await self._client.get(f"/lessons/module/{module_id}")

    async def get_by_course(self, course_id: str) -> JSON:
        return await self._client.get(f"/lessons/course/{course_id}")

    async def get_by_id(self, lesson_id: str) -> JSON:
        return await self._client.get(f"/lessons/{lesson_id}")


class QuizzesResource(_Resource):
    async def get_by_id(self, quiz_id: str) -> JSON:
        return await self._client.get(f"/quizzes/{quiz_id}")

    async def get_by_module(self, module_id: str) -> JSON:
        return await self._client.get(f"/quizzes/module/{module_id}")

    async def get_final_exam(self, course_id: str) -> JSON:
        return await self._client.get(f"/quizzes/course/{course_id}/final")

    async def submit(self, quiz_id: str, responses: list[dict[str, str]]) -> JSON:
        """Submit answers; the server scores the attempt."""
        return await self._client.post(
            f"/quizzes/{quiz_id}/submit", {"responses": responses}
        )

    async def get_attempts(self, quiz_id: str) -> JSON:
        return await self._client.get(f"/quizzes/{quiz_id}/attempts")


class EnrollmentsResource(_Resource):
    async def me(self) -> JSON:
        return await self._client.get("/enrollments/me")

    async def enroll(self, course_id: str) -> JSON:
        return await self._client.post("/enrollments", {"courseId": course_id})


class ProgressResource(_Resource):
    async def me(self) -> JSON:
        return await self._client.get("/progress/me")

    async def by_course(self, course_id: str) -> JSON:
        return await self._client.get(f"/progress/course/{course_id}")

    async def complete(self, lesson_id: str) -> JSON:
        return await self._client.post("/progress/complete", {"lessonId": lesson_id})

    async def reset_module(self, module_id: str) -> JSON:
        return await self._client.delete(f"/progress/module/{module_id}")


class CertificatesResource(_Resource):
    async def me(self) -> JSON:
        return await self._client.get("/certificates/me")

    async def get_by_id(self, certificate_id: str) -> JSON:
        return await self._client.get(f"/certificates/{certificate_id}")

    async def check_and_issue(self, course_id: str) -> JSON:
        return await self._client.post(
            "/certificates/check-and-issue", {"courseId": course_id}
        )

    async def verify(self, certificate_number: str) -> JSON:
        return await self._client.get(f"/certificates/verify/{certificate_number}")


class GroupsResource(_Resource):
    async def me(self) -> JSON:
        return await self._client.get("/groups/me")

    async def led(self) -> JSON:
        return await self._client.get("/groups/led")

    async def get_all(self) -> JSON:
        return await self._client.get("/groups")

    async def get_by_id(self, group_id: str) -> JSON:
        return await self._client.get(f"/groups/{group_id}")

    async def get_progress(self, group_id: str) -> JSON:
        return await self._client.get(f"/groups/{group_id}/progress")


class FaqsResource(_Resource):
    async def get_all(self, target_audience: str | None = None) -> JSON:
        params = {"targetAudience": target_audience} if target_audience else None
        return await self._client.request("GET", "/faqs", params=params)

    async def get_by_id(self, faq_id: str) -> JSON:
        return await self._client.get(f"/faqs/{faq_id}")


class SettingsResource(_Resource):
    async def get_all(self) -> JSON:
        return await self._client.get("/settings")

    async def get(self, key: str) -> JSON:
        return await self._client.get(f"/settings/{key}")

    async def get_topic_cards(self) -> JSON:
        return await self._client.get("/settings/topic-cards/all")

    async def get_roles(self) -> JSON:
        return await self._client.get("/settings/roles/all")
