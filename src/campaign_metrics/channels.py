"""Per-channel configuration records.

Each channel is described by a `ChannelConfig` naming its collection, the
field that carries the outcome, the values counted as positive, the facet
field and the date field used for trend bucketing. Aggregation code reads
these records instead of branching per channel.

`CHANNELS` is ordered linkedin, email, webinar. That order is also the
tie-break order when ranking channels.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel

from campaign_metrics.models import EmailContact, LinkedInContact, WebinarAttendee


@dataclass(frozen=True)
class ExtraRate:
    """An additional rate computed alongside the primary one.

    Attributes:
        name: Rate key in `ChannelMetrics.rates` (e.g. `reply_rate`).
        field: Record field tested for a positive value.
        positive_values: Values of `field` that count as a hit.
    """
    name: str
    field: str
    positive_values: tuple[object, ...] = (True,)


@dataclass(frozen=True)
class ChannelConfig:
    """Data-driven description of one outreach channel.

    Attributes:
        name: Channel key.
        label: Human-readable name used in reports.
        collection: Store collection holding the channel's records.
        status_field: Field carrying the outcome for the primary rate.
        positive_values: Outcome values counted as success.
        rate_name: Key of the primary rate.
        facet_field: Categorical field summarized as a distinct list.
        date_field: Calendar-day field used for trend buckets.
        status_values: Enumerated outcomes to count individually. Empty
            for boolean outcomes, where the positive count is reported
            under `status_field` instead.
        extra_rates: Further rates computed from other fields.
        record_model: Pydantic model used to validate fetched documents.
    """
    name: str
    label: str
    collection: str
    status_field: str
    positive_values: tuple[object, ...]
    rate_name: str
    facet_field: str
    date_field: str
    record_model: type[BaseModel]
    status_values: tuple[str, ...] = ()
    extra_rates: tuple[ExtraRate, ...] = field(default_factory=tuple)

    @property
    def rate_names(self) -> list[str]:
        return [self.rate_name, *(r.name for r in self.extra_rates)]


LINKEDIN = ChannelConfig(
    name="linkedin",
    label="LinkedIn",
    collection="linkedin_contacts",
    status_field="status",
    positive_values=("accepted",),
    rate_name="acceptance_rate",
    facet_field="company",
    date_field="date_sent",
    record_model=LinkedInContact,
    status_values=("accepted", "pending", "declined"),
)

EMAIL = ChannelConfig(
    name="email",
    label="Email",
    collection="email_contacts",
    status_field="opened",
    positive_values=(True,),
    rate_name="open_rate",
    facet_field="campaign_name",
    date_field="date_sent",
    record_model=EmailContact,
    extra_rates=(ExtraRate(name="reply_rate", field="replied"),),
)

WEBINAR = ChannelConfig(
    name="webinar",
    label="Webinar",
    collection="webinar_attendees",
    status_field="rsvp_status",
    positive_values=("confirmed",),
    rate_name="rsvp_rate",
    facet_field="industry",
    date_field="invited_date",
    record_model=WebinarAttendee,
    status_values=("confirmed", "pending", "declined"),
)

CHANNELS: tuple[ChannelConfig, ...] = (LINKEDIN, EMAIL, WEBINAR)

DATASETS_COLLECTION = "datasets"


def get_channel(name: str) -> ChannelConfig:
    """Return the config for `name`.

    Raises:
        KeyError: if no channel is registered under that name.
    """
    for config in CHANNELS:
        if config.name == name:
            return config
    raise KeyError(f"Unknown channel: {name!r}")
