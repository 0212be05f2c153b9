# application/executor/load_runner.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import time

from application.outcome import PageOutcome
from application.ports.http_client import HttpClientPort
from application.ports.logger import LoggerPort
from application.ports.loguru_logger import LoguruLogger
from application.ports.requests_client import RequestsSessionHttpClient
from application.services.drupal import login, search
from application.services.page_fetcher import fetch_page
from application.services.virtual_user import VirtualUser
from domain.exceptions import ConfigurationError
from domain.plan import LoadPlan
from infrastructure.url.base_url_resolver import BaseUrlResolver

HttpClientFactory = Callable[[LoadPlan], HttpClientPort]


def default_client_factory(plan: LoadPlan) -> HttpClientPort:
    return RequestsSessionHttpClient(base_headers=plan.headers, timeout_sec=plan.timeout_sec)


@dataclass(frozen=True)
class StepRecord:
    user: int
    iteration: int
    name: str
    ok: bool
    elapsed_ms: int
    error_message: Optional[str] = None
    asset_failures: int = 0


@dataclass(frozen=True)
class RunSummary:
    steps: Tuple[StepRecord, ...] = ()

    @property
    def ok(self) -> bool:
        return all(s.ok for s in self.steps)

    @property
    def failures(self) -> List[StepRecord]:
        return [s for s in self.steps if not s.ok]

    @property
    def asset_failures(self) -> int:
        return sum(s.asset_failures for s in self.steps)


class LoadRunner:
    """
    Minimal driver for a LoadPlan: ``plan.users`` virtual users run side by
    side, each on its own session, each logging in once and then walking the
    plan's pages (and search) ``plan.iterations`` times.
    """

    def __init__(self, client_factory: Optional[HttpClientFactory] = None, logger: Optional[LoggerPort] = None):
        self._client_factory = client_factory or default_client_factory
        self._logger = logger if logger is not None else LoguruLogger()

    def run(self, plan: LoadPlan) -> RunSummary:
        if plan.users < 1 or plan.iterations < 1:
            raise ConfigurationError("users and iterations must be at least 1")
        # an invalid base url aborts here, before any request is sent
        resolver = BaseUrlResolver(plan.base_url)

        with ThreadPoolExecutor(max_workers=plan.users) as executor:
            futures = [executor.submit(self._run_user, plan, resolver, index) for index in range(plan.users)]
            records: List[StepRecord] = []
            for future in futures:
                records.extend(future.result())

        summary = RunSummary(steps=tuple(records))
        self._logger.info(
            "run.end",
            steps=len(summary.steps),
            failed=len(summary.failures),
            asset_failures=summary.asset_failures,
        )
        return summary

    def _run_user(self, plan: LoadPlan, resolver: BaseUrlResolver, index: int) -> List[StepRecord]:
        http = self._client_factory(plan)
        user = VirtualUser(
            http=http,
            url_resolver=resolver,
            logger=self._logger.bind(user=index),
            max_asset_workers=plan.max_asset_workers,
        )
        records: List[StepRecord] = []
        user.logger.info("user.start")
        try:
            if plan.login is not None:
                records.append(self._run_step(user, index, 0, "login", lambda: login(user, plan.login)))

            for iteration in range(plan.iterations):
                for page in plan.pages:
                    records.append(
                        self._run_step(
                            user,
                            index,
                            iteration,
                            f"GET {page.path}",
                            lambda page=page: fetch_page(user, page.path, page.validate, load_assets=page.load_assets),
                        )
                    )
                if plan.search is not None:
                    records.append(self._run_step(user, index, iteration, "search", lambda: search(user, plan.search)))
        finally:
            close = getattr(http, "close", None)
            if callable(close):
                close()
        user.logger.info("user.end", steps=len(records), failed=sum(1 for r in records if not r.ok))
        return records

    def _run_step(
        self,
        user: VirtualUser,
        index: int,
        iteration: int,
        name: str,
        action: Callable[[], PageOutcome],
    ) -> StepRecord:
        user.logger.debug("step.start", step=name, iteration=iteration)
        t0 = time.perf_counter()

        outcome = action()

        elapsed_ms = int((time.perf_counter() - t0) * 1000)
        asset_failures = outcome.assets.failed if outcome.assets is not None else 0
        user.logger.info(
            "step.end",
            step=name,
            iteration=iteration,
            ok=outcome.ok,
            elapsed_ms=elapsed_ms,
            asset_failures=asset_failures,
        )
        return StepRecord(
            user=index,
            iteration=iteration,
            name=name,
            ok=outcome.ok,
            elapsed_ms=elapsed_ms,
            error_message=outcome.error_message,
            asset_failures=asset_failures,
        )
