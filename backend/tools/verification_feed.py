"""
Verification feeds — where "verified" values come from.

A feed takes an extracted profile and returns a FeedResult, or None when it
has nothing to say. Three implementations:

  SimulatedVerificationFeed — labelled simulation: bounded perturbations of
                              the claimed values from an injected RNG
  HttpVerificationFeed      — posts the claimed metrics to an external
                              verification service (httpx)
  StaticVerificationFeed    — returns a fixed, caller-provided result

fetch_verification() is the only entry point the pipeline uses; it fails
closed, turning every feed failure into None.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from schemas import (
    CDPCheck,
    CertificationCheck,
    Confidence,
    ExtractedDocumentProfile,
    FeedResult,
    GRICheck,
    ThirdPartyVerification,
    numeric_value,
)
from tools.verification import (
    CARBON_REDUCTION,
    RENEWABLE_ENERGY,
    SCOPE3_EMISSIONS,
    WASTE_RECYCLING,
    WATER_SAVINGS,
    WATER_USAGE,
    claimed_metrics_from_profile,
)

logger = logging.getLogger("verification_feed")


class VerificationFeedError(Exception):
    """Raised by a feed adapter when the external source cannot answer."""


@runtime_checkable
class VerificationFeed(Protocol):
    def fetch(self, profile: ExtractedDocumentProfile) -> Optional[FeedResult]:
        ...


def fetch_verification(
    feed: Optional[VerificationFeed],
    profile: ExtractedDocumentProfile,
) -> Optional[FeedResult]:
    """Ask the feed for verified values. No feed, no answer or any error → None.

    Anything a feed raises is logged and the run continues unverified.
    """
    if feed is None:
        return None
    try:
        return feed.fetch(profile)
    except VerificationFeedError as e:
        logger.warning("Verification feed failed, continuing unverified: %s", e)
        return None
    except Exception:
        logger.warning("Verification feed raised unexpectedly, continuing unverified", exc_info=True)
        return None


# ---------------------------------------------------------------------------
# Simulated feed
# ---------------------------------------------------------------------------

# [low, high) multiplier applied to each claimed value
PERTURBATION_RANGES: dict[str, tuple[float, float]] = {
    CARBON_REDUCTION: (0.85, 1.15),
    RENEWABLE_ENERGY: (0.95, 1.05),
    WATER_SAVINGS: (0.90, 1.05),
    WATER_USAGE: (0.90, 1.05),
    SCOPE3_EMISSIONS: (0.85, 1.10),
    WASTE_RECYCLING: (0.95, 1.05),
}

CDP_RANGE = (0.95, 1.05)
CERT_EXPIRY_PROBABILITY = 0.4

CERTIFICATION_SCOPES = {
    "ISO 14001": "Environmental Management System",
    "ISO 9001": "Quality Management System",
    "ISO 50001": "Energy Management System",
    "ISO 14064": "Greenhouse Gas Accounting",
}


def _cdp_confidence(deviation: float) -> Confidence:
    if deviation < 5:
        return "high"
    if deviation < 15:
        return "medium"
    return "low"


def _gri_confidence(missing: int) -> Confidence:
    if missing == 0:
        return "high"
    if missing < 3:
        return "medium"
    return "low"


class SimulatedVerificationFeed:
    """Clearly-labelled simulation of a third-party verification source.

    Every random draw comes from the injected `rng`, so a seeded
    random.Random makes the whole feed reproducible.
    """

    source = "simulated"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._now = now

    def _draw(self, low: float, high: float) -> float:
        return low + self._rng.random() * (high - low)

    def _cdp(self, profile: ExtractedDocumentProfile, now: datetime) -> CDPCheck:
        scope1 = numeric_value(profile.metrics.carbon_emissions.scope1)
        if not scope1:
            return CDPCheck()
        verified = scope1 * self._draw(*CDP_RANGE)
        deviation = abs(scope1 - verified) / scope1 * 100
        return CDPCheck(
            verified=True,
            confidence=_cdp_confidence(deviation),
            data={"scope1": verified},
            deviation=deviation,
            last_updated=now,
        )

    @staticmethod
    def _gri(profile: ExtractedDocumentProfile) -> GRICheck:
        data: dict[str, float] = {}
        missing: list[str] = []

        renewable = numeric_value(profile.metrics.renewable_energy.percentage)
        if renewable:
            data[RENEWABLE_ENERGY] = renewable
        else:
            missing.append("Renewable Energy Percentage")
        if profile.metrics.carbon_emissions.scope3 is None:
            missing.append("Scope 3 Emissions")

        return GRICheck(
            verified=bool(data),
            confidence=_gri_confidence(len(missing)),
            data=data,
            missing_data_points=missing,
        )

    def _certifications(self, profile: ExtractedDocumentProfile, now: datetime) -> list[CertificationCheck]:
        checks = []
        for name in profile.evidence.certifications:
            expired = self._rng.random() < CERT_EXPIRY_PROBABILITY
            expiration = now - timedelta(days=30) if expired else now + timedelta(days=365)
            checks.append(CertificationCheck(
                type=name,
                valid=not expired,
                expired=expired,
                expiration_date=expiration,
                scope=CERTIFICATION_SCOPES.get(name, ""),
            ))
        return checks

    def fetch(self, profile: ExtractedDocumentProfile) -> FeedResult:
        now = self._now or datetime.now(timezone.utc)
        claimed = claimed_metrics_from_profile(profile)

        verified = {
            key: value * self._draw(*PERTURBATION_RANGES[key])
            for key, value in claimed.items()
        }

        return FeedResult(
            source=self.source,
            simulated=True,
            verified_metrics=verified,
            third_party=ThirdPartyVerification(
                cdp=self._cdp(profile, now),
                gri=self._gri(profile),
                certifications=self._certifications(profile, now),
            ),
        )


# ---------------------------------------------------------------------------
# HTTP feed
# ---------------------------------------------------------------------------

class HttpVerificationFeed:
    """Adapter for an external verification service.

    POSTs {"claimedMetrics": {...}, "profile": {...}} and expects a FeedResult
    JSON body (camelCase). 204 / empty body means "nothing to report".
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    def _post(self, client: httpx.Client, payload: dict) -> httpx.Response:
        return client.post(self.url, json=payload, timeout=self.timeout)

    def fetch(self, profile: ExtractedDocumentProfile) -> Optional[FeedResult]:
        payload = {
            "claimedMetrics": claimed_metrics_from_profile(profile),
            "profile": profile.model_dump(mode="json", by_alias=True),
        }
        logger.info("Requesting verification from %s", self.url)

        try:
            if self._client is not None:
                response = self._post(self._client, payload)
            else:
                with httpx.Client() as client:
                    response = self._post(client, payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise VerificationFeedError(f"{self.url}: {e}") from e

        if response.status_code == 204 or not response.content:
            logger.info("Verification service returned no data")
            return None

        try:
            return FeedResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise VerificationFeedError(f"Invalid verification payload from {self.url}: {e}") from e


# ---------------------------------------------------------------------------
# Static feed
# ---------------------------------------------------------------------------

class StaticVerificationFeed:
    """Returns the same caller-provided result for every document."""

    def __init__(self, result: Optional[FeedResult]) -> None:
        self._result = result

    def fetch(self, profile: ExtractedDocumentProfile) -> Optional[FeedResult]:
        return self._result
