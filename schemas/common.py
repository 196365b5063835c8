from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # The web client speaks camelCase JSON.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def as_naive_utc(value: datetime) -> datetime:
    """Stored timestamps are naive UTC; bring client-sent aware ones in line so they compare."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


NaiveUTCDatetime = Annotated[datetime, AfterValidator(as_naive_utc)]
