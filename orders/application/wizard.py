"""Order wizard: the multi-step order submission state machine.

Mental model refresher:
- The wizard owns the draft, the current step and the submission state.
- Collaborators are injected: who is signed in, where orders are stored,
  who gets told about a new order, and how the host page navigates.
- Steps: order type -> project type -> site details -> contact -> recap -> success.
  `free` orders leave for the contact page at step 1, `bot` projects stop at
  step 2 on a Discord invite panel.
- Submitting inserts the order, then notifies in the background. A failed
  notification never undoes or blocks a stored order.
"""

from __future__ import annotations

import asyncio
import copy
import os
from enum import Enum, IntEnum

from ..domain.draft import (
    DEFAULT_EXTRA_COLOR,
    SITE_TYPES,
    Identity,
    NotificationRequest,
    OrderDraft,
    OrderType,
    ProjectType,
    build_order_record,
    notification_request_from_record,
)
from ..domain.validation import (
    FIELD_RULES,
    ORDER_ID_FORMAT,
    ORDER_ID_LENGTH,
    ORDER_ID_TAKEN,
    contact_details_complete,
    email_error,
    is_valid_order_id,
    step_gate,
    validate_field,
)
from ..errors import NotificationError, OrderIdConflictError, PersistenceError
from ..types import (
    ErrorSinkFn,
    IdentityProvider,
    NavigateFn,
    OrderNotifier,
    OrderRecord,
    OrderStore,
    ToastFn,
)

DISCORD_INVITE_URL = "https://discord.gg/9mKPA3kHBA"
SUBMIT_SUCCESS = "order.success"
SUBMIT_ERROR = "order.submit_error"

_TEXT_FIELDS = frozenset(
    {
        "site_type_other",
        "site_name",
        "specific_instructions",
        "description",
        "budget_text",
        "full_name",
    }
)


class WizardStep(IntEnum):
    ORDER_TYPE = 1
    PROJECT_TYPE = 2
    SITE_DETAILS = 3
    CONTACT = 4
    RECAP = 5
    SUCCESS = 6


class SubmissionState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


_STEP_VIEWS = {
    WizardStep.ORDER_TYPE: "order_type",
    WizardStep.PROJECT_TYPE: "project_type",
    WizardStep.SITE_DETAILS: "site_details",
    WizardStep.CONTACT: "contact",
    WizardStep.RECAP: "recap",
    WizardStep.SUCCESS: "success",
}


class OrderWizard:
    def __init__(
        self,
        *,
        identity: IdentityProvider,
        store: OrderStore,
        notifier: OrderNotifier,
        navigate_home: NavigateFn | None = None,
        navigate_contact: NavigateFn | None = None,
        toast: ToastFn | None = None,
        on_notification_error: ErrorSinkFn | None = None,
        draft: OrderDraft | None = None,
        invite_url: str | None = None,
    ) -> None:
        self._identity = identity
        self._store = store
        self._notifier = notifier
        self._navigate_home = navigate_home or _noop
        self._navigate_contact = navigate_contact or _noop
        self._toast = toast or _print_toast
        self._on_notification_error = on_notification_error or _print_notification_error
        self.invite_url = invite_url or os.getenv("DISCORD_INVITE_URL", DISCORD_INVITE_URL)

        self.draft = draft or OrderDraft()
        self.step = WizardStep.ORDER_TYPE
        self.submission_state = SubmissionState.EDITING
        self.order_id_error: str | None = None
        self.email_error: str | None = None
        self.notification_errors: list[BaseException] = []

        self._field_errors: dict[str, str] = {}
        self._touched: set[str] = set()
        self._order_id_check_seq = 0
        self._notification_tasks: set[asyncio.Task[None]] = set()

    # -- state queries -----------------------------------------------------

    @property
    def identity(self) -> Identity | None:
        return self._identity.current_identity()

    @property
    def requires_login(self) -> bool:
        return self.identity is None

    @property
    def view(self) -> str:
        if self.requires_login:
            return "login"
        if self.step is WizardStep.PROJECT_TYPE and self.draft.project_type is ProjectType.BOT:
            return "bot_invite"
        return _STEP_VIEWS[self.step]

    @property
    def total_steps(self) -> int:
        if self.draft.order_type in (None, OrderType.FREE):
            return 1
        if self.draft.project_type in (None, ProjectType.BOT):
            return 2
        return len(WizardStep)

    @property
    def is_submitting(self) -> bool:
        return self.submission_state is SubmissionState.SUBMITTING

    @property
    def can_go_next(self) -> bool:
        if self.requires_login or self.step >= WizardStep.RECAP:
            return False
        if self.draft.project_type is ProjectType.BOT:
            return False
        return self.can_proceed()

    def can_proceed(self, step: int | None = None) -> bool:
        return step_gate(
            self.step if step is None else step,
            self.draft,
            order_id_error=self.order_id_error,
        )

    def field_error(self, field: str) -> str | None:
        """Message key for `field`, shown only once the field has been blurred."""
        if field not in self._touched:
            return None
        return self._field_errors.get(field)

    @property
    def visible_errors(self) -> dict[str, str]:
        errors = {
            field: key for field, key in self._field_errors.items() if field in self._touched
        }
        if self.email_error:
            errors["email"] = self.email_error
        if self.order_id_error:
            errors["order_id"] = self.order_id_error
        return errors

    # -- navigation --------------------------------------------------------

    def select_order_type(self, order_type: OrderType | str) -> bool:
        if self.requires_login or self.step is not WizardStep.ORDER_TYPE:
            return False
        self.draft.order_type = OrderType(order_type)
        return True

    def select_project_type(self, project_type: ProjectType | str) -> bool:
        if self.requires_login or self.step is not WizardStep.PROJECT_TYPE:
            return False
        self.draft.project_type = ProjectType(project_type)
        return True

    def next(self) -> bool:
        """Advance one step. Returns True only when the step changed."""
        if self.requires_login or self.step >= WizardStep.RECAP:
            return False
        if self.draft.order_type is OrderType.FREE:
            self._navigate_contact()
            return False
        if self.draft.project_type is ProjectType.BOT:
            return False
        if not self.can_proceed():
            return False
        self.step = WizardStep(min(self.step + 1, self.total_steps))
        return True

    def back(self) -> None:
        if self.is_submitting or self.step is WizardStep.SUCCESS:
            return
        if self.step is WizardStep.ORDER_TYPE:
            self._navigate_home()
            return
        leaving = self.step
        self.step = WizardStep(self.step - 1)
        # Only the project type choice is undone; later steps keep their data.
        if leaving is WizardStep.PROJECT_TYPE:
            self.draft.project_type = None

    def return_home(self) -> None:
        self._navigate_home()

    # -- field editing -----------------------------------------------------

    def set_site_type(self, site_type: str) -> None:
        if site_type not in SITE_TYPES:
            raise ValueError(f"Unknown site type: {site_type!r}")
        self.draft.site_type = site_type

    def set_field(self, field: str, value: str) -> None:
        if field not in _TEXT_FIELDS:
            raise ValueError(f"Not an editable text field: {field}")
        setattr(self.draft, field, value)
        if field in FIELD_RULES:
            self._revalidate(field)

    def blur(self, field: str) -> None:
        self._touched.add(field)
        if field in FIELD_RULES:
            self._revalidate(field)

    def set_email(self, value: str) -> None:
        self.draft.email = value
        self.email_error = email_error(value)

    def set_budget(self, amount: float | None) -> None:
        if amount is not None and amount < 0:
            raise ValueError("budget must be >= 0")
        self.draft.budget = amount

    def set_colors(self, *, primary: str | None = None, secondary: str | None = None) -> None:
        if primary is not None:
            self.draft.primary_color = primary
        if secondary is not None:
            self.draft.secondary_color = secondary

    def add_logo_url(self) -> None:
        self.draft.logo_urls.append("")

    def update_logo_url(self, index: int, value: str) -> None:
        self.draft.logo_urls[index] = value

    def remove_logo_url(self, index: int) -> None:
        if len(self.draft.logo_urls) > 1:
            del self.draft.logo_urls[index]

    def add_other_color(self) -> None:
        self.draft.other_colors.append(DEFAULT_EXTRA_COLOR)

    def update_other_color(self, index: int, value: str) -> None:
        self.draft.other_colors[index] = value

    def remove_other_color(self, index: int) -> None:
        del self.draft.other_colors[index]

    async def set_order_id(self, value: str) -> None:
        """Store a new candidate id and check it once it has 8 characters.

        Each change takes a new sequence token; a response that arrives after
        a newer change is dropped so it cannot overwrite the current error.
        """
        self.draft.order_id = value
        self.order_id_error = None
        self._order_id_check_seq += 1
        token = self._order_id_check_seq

        if len(value) != ORDER_ID_LENGTH:
            return
        if not is_valid_order_id(value):
            self.order_id_error = ORDER_ID_FORMAT
            return

        try:
            taken = await self._store.order_exists(value)
        except PersistenceError as exc:
            print(f"[ORDER ID CHECK ERROR] order_id={value} error={exc}")
            return

        if token != self._order_id_check_seq:
            return
        if taken:
            self.order_id_error = ORDER_ID_TAKEN

    async def check_order_id_available(self, order_id: str) -> bool:
        return not await self._store.order_exists(order_id)

    # -- submission --------------------------------------------------------

    async def submit(self) -> bool:
        """Store the order, fire the notification and move to the success step."""
        if self.step is not WizardStep.RECAP or self.is_submitting or self.requires_login:
            return False
        if not contact_details_complete(self.draft, order_id_error=self.order_id_error):
            return False

        # Later edits must not reach the stored record.
        draft = copy.deepcopy(self.draft)
        order_id = draft.order_id
        if not is_valid_order_id(order_id):
            self.order_id_error = ORDER_ID_FORMAT
            return False

        self.submission_state = SubmissionState.SUBMITTING
        try:
            taken = await self._store.order_exists(order_id)
        except PersistenceError as exc:
            self._submit_failed(exc)
            return False
        if taken:
            self.order_id_error = ORDER_ID_TAKEN
            self.submission_state = SubmissionState.EDITING
            return False

        identity = self.identity
        record = build_order_record(draft, identity)
        try:
            await self._store.insert_order(record)
        except OrderIdConflictError:
            self.order_id_error = ORDER_ID_TAKEN
            self.submission_state = SubmissionState.FAILED
            return False
        except PersistenceError as exc:
            self._submit_failed(exc)
            return False

        print(f"[ORDER STORED] order_id={order_id} user_id={record['user_id']}")
        self._schedule_notification(record, identity)
        self.submission_state = SubmissionState.SUCCEEDED
        self.step = WizardStep.SUCCESS
        self._toast("success", SUBMIT_SUCCESS)
        return True

    async def drain_notifications(self) -> None:
        """Wait for background notifications started by `submit`."""
        if self._notification_tasks:
            await asyncio.gather(*list(self._notification_tasks), return_exceptions=True)
            # Let pending done-callbacks record failures before returning.
            await asyncio.sleep(0)

    def _submit_failed(self, exc: Exception) -> None:
        print(f"[ORDER SUBMIT ERROR] order_id={self.draft.order_id} error={exc}")
        self.submission_state = SubmissionState.FAILED
        self._toast("error", SUBMIT_ERROR)

    def _schedule_notification(self, record: OrderRecord, identity: Identity | None) -> None:
        request = notification_request_from_record(record, identity)
        try:
            request.validate()
        except ValueError as exc:
            self._notification_failed(exc)
            return
        task = asyncio.create_task(self._notify(request, identity))
        self._notification_tasks.add(task)
        task.add_done_callback(self._notification_done)

    async def _notify(self, request: NotificationRequest, identity: Identity | None) -> None:
        result = await self._notifier.notify_order(request, identity=identity)
        if not result.get("success"):
            raise NotificationError(
                str(result.get("error") or "notification failed"),
                details=result.get("details"),
            )

    def _notification_done(self, task: asyncio.Task[None]) -> None:
        self._notification_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self._notification_failed(exc)

    def _notification_failed(self, exc: BaseException) -> None:
        self.notification_errors.append(exc)
        self._on_notification_error(exc)

    def _revalidate(self, field: str) -> None:
        error = validate_field(field, getattr(self.draft, field))
        if error is None:
            self._field_errors.pop(field, None)
        else:
            self._field_errors[field] = error


def _noop() -> None:
    return None


def _print_toast(kind: str, message_key: str) -> None:
    print(f"[TOAST] kind={kind} message={message_key}")


def _print_notification_error(exc: BaseException) -> None:
    details = getattr(exc, "details", None)
    print(f"[NOTIFY ERROR] error={exc} details={details}")
