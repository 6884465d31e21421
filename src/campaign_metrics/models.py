"""Pydantic models for stored records and derived outputs.

Contact models mirror the documents the upload service writes to the
per-channel collections. They are lenient: outcome and date fields may be
null, identifiers are coerced to text, and dates that cannot be parsed
become `None`. `ChannelMetrics`, `TrendPoint` and `Report` are derived on
every call and never persisted.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    computed_field,
)


def to_calendar_day(value: Any) -> date | None:
    """Reduce ISO strings, dates and datetimes to a day; anything else is None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def _to_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


CalendarDay = Annotated[date | None, BeforeValidator(to_calendar_day)]
Text = Annotated[str | None, BeforeValidator(_to_text)]
Identifier = Annotated[str, BeforeValidator(_to_text)]
Percent = Annotated[float, Field(ge=0.0, le=100.0)]
ChannelName = Literal["linkedin", "email", "webinar"]


class _Record(BaseModel):
    """Fields shared by every contact record."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    id: Identifier
    dataset_id: Text = None
    created_at: datetime | None = None


class LinkedInContact(_Record):
    """A LinkedIn connection request sent to one contact."""
    name: Text = None
    company: Text = None
    position: Text = None
    status: Text = None
    date_sent: CalendarDay = None


class EmailContact(_Record):
    """One recipient of an email campaign."""
    name: Text = None
    email: Text = None
    campaign_name: Text = None
    subject: Text = None
    opened: bool | None = None
    replied: bool | None = None
    date_sent: CalendarDay = None


class WebinarAttendee(_Record):
    """A webinar invitation and its RSVP outcome."""
    name: Text = None
    email: Text = None
    company: Text = None
    industry: Text = None
    rsvp_status: Text = None
    invited_date: CalendarDay = None


class CampaignSummary(BaseModel):
    """Campaign annotation attached to a dataset after upload.

    Display-only: the report carries it through but never computes on it.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True)
    title: str
    description: str
    objectives: str | None = None
    target_audience: str | None = Field(default=None, alias="targetAudience")
    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")
    budget: str | None = None
    expected_outcomes: str | None = Field(default=None, alias="expectedOutcomes")
    kpis: list[str] = Field(default_factory=list)
    notes: str | None = None


class Dataset(BaseModel):
    """One uploaded batch of records for a single channel."""
    model_config = ConfigDict(extra="ignore", frozen=True)
    id: str
    name: str
    type: ChannelName
    row_count: int = Field(default=0, ge=0)
    upload_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    campaign_summary: CampaignSummary | None = None
    created_at: datetime | None = None


class ChannelMetrics(BaseModel):
    """KPIs for one channel computed from its full record set.

    Attributes:
        channel: Channel name (`linkedin`, `email`, `webinar`).
        total: Number of records (sent or invited).
        status_counts: Count per status value (or per boolean flag).
        rates: Percentages keyed by rate name, e.g. `acceptance_rate`.
        primary_rate_name: Key of the rate used for ranking channels.
        facets: Distinct facet values in first-seen order.
        recent_activity: The first five records in store order.
    """
    model_config = ConfigDict(frozen=True)
    channel: ChannelName
    total: int = Field(..., ge=0)
    status_counts: dict[str, int] = Field(default_factory=dict)
    rates: dict[str, Percent] = Field(default_factory=dict)
    primary_rate_name: str
    facets: list[str] = Field(default_factory=list)
    recent_activity: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def primary_rate(self) -> float:
        return self.rates.get(self.primary_rate_name, 0.0)

    def rate(self, name: str) -> float:
        """Return a named rate, raising KeyError for unknown names."""
        return self.rates[name]

    def count(self, status: str) -> int:
        return self.status_counts.get(status, 0)


class DashboardMetrics(BaseModel):
    """Everything one aggregation call produces for the dashboard.

    `degraded` is set when at least one store query failed; `errors` holds
    the user-facing notices for those failures.
    """
    linkedin: ChannelMetrics
    email: ChannelMetrics
    webinar: ChannelMetrics
    datasets: list[Dataset] = Field(default_factory=list)
    degraded: bool = False
    errors: list[str] = Field(default_factory=list)

    def channels(self) -> list[ChannelMetrics]:
        return [self.linkedin, self.email, self.webinar]


class TrendPoint(BaseModel):
    """Per-channel rates for one weekly bucket."""
    model_config = ConfigDict(frozen=True)
    label: str
    start: date
    end: date
    rates: dict[str, Percent]
    counts: dict[str, int]


class FacetShare(BaseModel):
    """Record count for one distinct facet value."""
    model_config = ConfigDict(frozen=True)
    name: str
    count: int = Field(..., ge=0)
    share_pct: Percent


class Report(BaseModel):
    """Summary of channel performance with recommendations."""
    total_contacts: int = Field(..., ge=0)
    overall_performance: float
    top_channel: ChannelName
    recommendations: list[str]
    generated_at: datetime
    campaign_summaries: list[CampaignSummary] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_performance_display(self) -> str:
        return f"{self.overall_performance:.1f}"
