"""Identity context attached to a logged-in client."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

CLUSTER_HEADER = "X-Ncr-Cluster-Slug"
SUBJECT_HEADER = "X-Ncr-Subject"


class Identity(BaseModel):
    """Cluster and subject a client acts on behalf of."""

    model_config = ConfigDict(frozen=True)

    cluster: str | None = Field(default=None, description="Cluster slug")
    subject: str | None = Field(default=None, description="Subject the robot acts for")

    def headers(self) -> dict[str, str]:
        """Return identity headers for the fields that are set."""
        headers: dict[str, str] = {}
        if self.cluster:
            headers[CLUSTER_HEADER] = self.cluster
        if self.subject:
            headers[SUBJECT_HEADER] = self.subject
        return headers
