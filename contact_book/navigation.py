"""Client-side navigation state and search-box reconciliation.

``ClientRouter`` plays the part of the browser-side router: it owns the
history stack, tracks whether the app is idle, loading a view, or
submitting a form, and keeps the search field, the ``q`` query parameter
and the sidebar list in step with each other.

Navigations are two-phase so pending states can be observed: ``navigate``,
``submit``, ``search_changed``, ``back`` and ``forward`` start a
navigation; ``complete`` (or ``settle``) runs it through the transport and
commits the loader data. Only the newest navigation commits; completing a
superseded one is a no-op for rendering.
"""
from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol
from urllib.parse import urlencode, urlsplit

import requests

from .config import Settings
from .contacts import Contact, ContactStore
from .revalidation import Invalidation, InvalidationBus
from .routes import (
    NotFound,
    PreconditionViolation,
    Redirect,
    RootData,
    contact_loader,
    create_action,
    destroy_action,
    favorite_action,
    root_loader,
    search_query,
    update_action,
)

logger = logging.getLogger(__name__)


class NavigationState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUBMITTING = "submitting"


class HistoryMode(str, Enum):
    """What a navigation does to the history stack when it commits."""
    PUSH = "push"
    REPLACE = "replace"
    POP = "pop"  # back/forward: the stack already moved
    NONE = "none"  # revalidation of the current entry


@dataclass(frozen=True)
class Location:
    pathname: str = "/"
    search: str = ""

    @classmethod
    def parse(cls, href: str) -> Location:
        parts = urlsplit(href)
        return cls(pathname=parts.path or "/", search=parts.query)

    @classmethod
    def for_search(cls, text: str) -> Location:
        return cls(pathname="/", search=urlencode({"q": text}))

    @property
    def query(self) -> Optional[str]:
        """The ``q`` parameter: None when absent, "" when blank."""
        return search_query(f"?{self.search}")

    @property
    def href(self) -> str:
        return f"{self.pathname}?{self.search}" if self.search else self.pathname


@dataclass(frozen=True)
class Submission:
    action: str
    form: Mapping[str, str] = field(default_factory=dict)
    method: str = "post"


@dataclass
class NavigationIntent:
    """A pending navigation.

    ``history_mode`` is decided when the intent is created (for searches,
    from whether a ``q`` had been committed yet) and applied on commit.
    """
    id: int
    state: NavigationState
    location: Location
    history_mode: HistoryMode
    submission: Optional[Submission] = None
    is_search: bool = False
    started_at: float = 0.0
    data_version: int = 0


@dataclass
class RouteMatch:
    view: str
    params: Dict[str, str] = field(default_factory=dict)


@dataclass
class LoaderResult:
    """Everything the mounted views read for one location."""
    location: Location
    view: str
    root: RootData
    contact: Optional[Contact] = None
    not_found: bool = False

    @property
    def q(self) -> Optional[str]:
        return self.root.q


PAGE_VIEWS = ("index", "contact", "edit")

_CONTACT_PATH = re.compile(r"^/contacts/(?P<contact_id>[^/]+)(?:/(?P<sub>edit|destroy|favorite))?/?$")


def match_route(pathname: str) -> RouteMatch:
    """Map a path onto a view name and its route params."""
    if pathname in ("", "/"):
        return RouteMatch(view="index")
    match = _CONTACT_PATH.match(pathname)
    if match is None:
        return RouteMatch(view="missing")
    sub = match.group("sub")
    view = "contact" if sub is None else sub
    return RouteMatch(view=view, params={"contact_id": match.group("contact_id")})


class BrowserHistory:
    """Session history: a list of entries and a cursor."""

    def __init__(self, initial: Location) -> None:
        self._entries: List[Location] = [initial]
        self._index = 0

    @property
    def current(self) -> Location:
        return self._entries[self._index]

    @property
    def length(self) -> int:
        return len(self._entries)

    @property
    def index(self) -> int:
        return self._index

    @property
    def entries(self) -> List[Location]:
        return list(self._entries)

    def push(self, location: Location) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(location)
        self._index += 1

    def replace(self, location: Location) -> None:
        self._entries[self._index] = location

    def back(self) -> Optional[Location]:
        if self._index == 0:
            return None
        self._index -= 1
        return self.current

    def forward(self) -> Optional[Location]:
        if self._index >= len(self._entries) - 1:
            return None
        self._index += 1
        return self.current


class Transport(Protocol):
    def load(self, location: Location) -> LoaderResult:
        ...

    def submit(self, submission: Submission) -> Redirect:
        ...


class InProcessTransport:
    """Runs loaders and actions directly against a store."""

    def __init__(
        self,
        store: ContactStore,
        bus: InvalidationBus,
        *,
        environment: Optional[str] = None,
    ) -> None:
        self.store = store
        self.bus = bus
        self.environment = environment

    def load(self, location: Location) -> LoaderResult:
        route = match_route(location.pathname)
        result = LoaderResult(
            location=location,
            view=route.view,
            root=root_loader(self.store, location.href),
        )
        if route.view not in PAGE_VIEWS:
            result.not_found = True
        elif "contact_id" in route.params:
            try:
                result.contact = contact_loader(self.store, route.params).contact
            except NotFound:
                result.not_found = True
        return result

    def submit(self, submission: Submission) -> Redirect:
        route = match_route(Location.parse(submission.action).pathname)
        if submission.method.lower() != "post":
            raise PreconditionViolation(f"Unsupported form method {submission.method!r}")
        if route.view == "index":
            return create_action(self.store, self.bus, environment=self.environment)
        if route.view == "edit":
            return update_action(
                self.store, self.bus, route.params, submission.form,
                environment=self.environment,
            )
        if route.view == "favorite":
            return favorite_action(
                self.store, self.bus, route.params, submission.form,
                environment=self.environment,
            )
        if route.view == "destroy":
            return destroy_action(self.store, self.bus, route.params, environment=self.environment)
        raise PreconditionViolation(f"No action is routed at {submission.action!r}")


class HttpTransport:
    """Talks to the JSON loader/action routes of the web service.

    ``session`` is anything with ``requests``-style ``get``/``post``. A fresh
    ``requests.Session`` is opened when none is given; tests pass a FastAPI
    ``TestClient``.
    """

    def __init__(self, session: Any = None, base_url: str = "") -> None:
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/data{path}"

    def load(self, location: Location) -> LoaderResult:
        route = match_route(location.pathname)
        q = location.query
        params = {"q": q} if q is not None else None
        resp = self.session.get(self._url("/root"), params=params)
        resp.raise_for_status()
        body = resp.json()
        result = LoaderResult(
            location=location,
            view=route.view,
            root=RootData(
                contacts=[Contact.from_dict(item) for item in body["contacts"]],
                q=body.get("q"),
            ),
        )
        if route.view not in PAGE_VIEWS:
            result.not_found = True
        elif "contact_id" in route.params:
            detail = self.session.get(self._url(f"/contacts/{route.params['contact_id']}"))
            if detail.status_code == 404:
                result.not_found = True
            else:
                detail.raise_for_status()
                result.contact = Contact.from_dict(detail.json()["contact"])
        return result

    def submit(self, submission: Submission) -> Redirect:
        pathname = Location.parse(submission.action).pathname
        resp = self.session.post(self._url(pathname), data=dict(submission.form))
        if resp.status_code == 404:
            raise NotFound(match_route(pathname).params.get("contact_id", pathname))
        resp.raise_for_status()
        return Redirect(resp.json()["redirect"])


class ClientRouter:
    """Navigation state machine for one browser tab."""

    def __init__(
        self,
        transport: Transport,
        bus: Optional[InvalidationBus] = None,
        initial_href: str = "/",
        *,
        search_debounce_ms: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.transport = transport
        self.bus = bus
        self.search_debounce_ms = search_debounce_ms
        self._clock = clock
        self._next_id = 0
        self.state = NavigationState.IDLE
        self.pending: Optional[NavigationIntent] = None
        self.history = BrowserHistory(Location.parse(initial_href))
        self.search_value = ""
        self.last_invalidation: Optional[Invalidation] = None
        self._unsubscribe = bus.subscribe(self._on_invalidate) if bus else None

        # Initial document load, same as a full page reload.
        self._data_version = self._bus_version()
        self.loader_data = transport.load(self.history.current)
        self._sync_search_field()

    @classmethod
    def in_process(
        cls,
        store: ContactStore,
        bus: InvalidationBus,
        settings: Settings,
        initial_href: str = "/",
    ) -> ClientRouter:
        """Router wired straight to ``store`` with debounce from settings."""
        transport = InProcessTransport(store, bus, environment=settings.environment)
        return cls(
            transport,
            bus,
            initial_href,
            search_debounce_ms=settings.search_debounce_ms,
        )

    # -- derived view state ------------------------------------------------

    @property
    def location(self) -> Location:
        return self.history.current

    @property
    def committed_q(self) -> Optional[str]:
        return self.loader_data.q

    @property
    def contacts(self) -> List[Contact]:
        return self.loader_data.root.contacts

    @property
    def searching(self) -> bool:
        """A read is pending whose target carries a non-empty ``q``."""
        pending = self.pending
        return (
            self.state is NavigationState.LOADING
            and pending is not None
            and pending.history_mode is not HistoryMode.NONE
            and bool(pending.location.query)
        )

    @property
    def detail_loading(self) -> bool:
        """The detail pane is about to change to another view."""
        pending = self.pending
        if self.state is not NavigationState.LOADING or pending is None:
            return False
        if pending.history_mode is HistoryMode.NONE:
            return False
        if self.searching or pending.is_search:
            return False
        # Compare with the committed view: back/forward move the history
        # cursor before their data arrives.
        return pending.location.pathname != self.loader_data.location.pathname

    @property
    def is_stale(self) -> bool:
        """A write was broadcast after the committed data was read."""
        return self._bus_version() > self._data_version

    # -- starting navigations ---------------------------------------------

    def navigate(self, href: str, *, replace: bool = False) -> NavigationIntent:
        mode = HistoryMode.REPLACE if replace else HistoryMode.PUSH
        return self._start(NavigationState.LOADING, Location.parse(href), mode)

    def submit(
        self,
        action: str,
        form: Optional[Mapping[str, str]] = None,
        *,
        method: str = "post",
        replace: bool = False,
    ) -> NavigationIntent:
        submission = Submission(action=action, form=dict(form or {}), method=method)
        mode = HistoryMode.REPLACE if replace else HistoryMode.PUSH
        return self._start(
            NavigationState.SUBMITTING,
            Location.parse(action),
            mode,
            submission=submission,
        )

    def search_changed(self, text: str) -> NavigationIntent:
        """Keystroke handler for the search field.

        The first search of a session pushes a history entry; later
        keystrokes replace it so Back returns to the pre-search view.
        """
        location = Location.for_search(text)
        pending = self.pending
        if (
            self.search_debounce_ms
            and pending is not None
            and pending.is_search
            and (self._clock() - pending.started_at) * 1000 < self.search_debounce_ms
        ):
            pending.location = location
            pending.started_at = self._clock()
            return pending

        is_first_search = self.committed_q is None
        mode = HistoryMode.PUSH if is_first_search else HistoryMode.REPLACE
        return self._start(NavigationState.LOADING, location, mode, is_search=True)

    def back(self) -> Optional[NavigationIntent]:
        location = self.history.back()
        if location is None:
            return None
        return self._start(NavigationState.LOADING, location, HistoryMode.POP)

    def forward(self) -> Optional[NavigationIntent]:
        location = self.history.forward()
        if location is None:
            return None
        return self._start(NavigationState.LOADING, location, HistoryMode.POP)

    def revalidate(self) -> NavigationIntent:
        """Re-run every mounted loader for the current entry."""
        return self._start(NavigationState.LOADING, self.location, HistoryMode.NONE)

    # -- completing navigations -------------------------------------------

    def complete(self, intent: Optional[NavigationIntent] = None) -> Optional[NavigationIntent]:
        """Finish ``intent`` (default: the pending one).

        Returns the follow-up load when a submission redirects, else None.
        """
        intent = intent or self.pending
        if intent is None:
            return None
        superseded = intent is not self.pending

        if intent.submission is not None:
            # The write went out when the form was submitted, so it lands
            # even if another navigation has since taken over.
            try:
                redirect = self.transport.submit(intent.submission)
            except NotFound as exc:
                logger.info(f"[Navigation] Submission to missing contact {exc.contact_id}")
                if superseded:
                    return None
                return self._start(NavigationState.LOADING, self.location, HistoryMode.NONE)
            if superseded:
                logger.debug(f"[Navigation] Dropping superseded submission #{intent.id}")
                return None
            return self._start(
                NavigationState.LOADING,
                Location.parse(redirect.location),
                intent.history_mode,
            )

        if superseded:
            logger.debug(f"[Navigation] Dropping superseded load #{intent.id}")
            return None

        # Loaders run now, so every write published up to here is included.
        intent.data_version = self._bus_version()
        result = self.transport.load(intent.location)
        self._commit(intent, result)
        return None

    def settle(self) -> None:
        """Complete pending navigations (and their redirects) until idle."""
        while self.pending is not None:
            self.complete()

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # -- internals ---------------------------------------------------------

    def _start(
        self,
        state: NavigationState,
        location: Location,
        mode: HistoryMode,
        *,
        submission: Optional[Submission] = None,
        is_search: bool = False,
    ) -> NavigationIntent:
        self._next_id += 1
        intent = NavigationIntent(
            id=self._next_id,
            state=state,
            location=location,
            history_mode=mode,
            submission=submission,
            is_search=is_search,
            started_at=self._clock(),
        )
        if self.pending is not None:
            logger.debug(f"[Navigation] #{intent.id} supersedes #{self.pending.id}")
        self.pending = intent
        self.state = state
        return intent

    def _commit(self, intent: NavigationIntent, result: LoaderResult) -> None:
        if intent.history_mode is HistoryMode.PUSH:
            self.history.push(intent.location)
        elif intent.history_mode is HistoryMode.REPLACE:
            self.history.replace(intent.location)

        self.loader_data = result
        self._data_version = intent.data_version
        self.pending = None
        self.state = NavigationState.IDLE
        self._sync_search_field()

    def _sync_search_field(self) -> None:
        # Back/forward restore the URL and list without a change event, so
        # the field is always reset from the committed loader data.
        self.search_value = self.committed_q or ""

    def _on_invalidate(self, event: Invalidation) -> None:
        self.last_invalidation = event
        # A pending navigation loads after this write when it completes. An
        # idle tab re-runs the loaders of the entry it is showing.
        if self.pending is None:
            logger.debug(
                f"[Navigation] Revalidating {self.location.href} after {event.reason} #{event.sequence}"
            )
            self.revalidate()

    def _bus_version(self) -> int:
        return self.bus.version if self.bus is not None else 0
