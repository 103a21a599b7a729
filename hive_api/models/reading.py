from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class Reading(BaseModel):
    model_config = ConfigDict(extra="allow", strict=True)

    device_id: StrictStr = Field(min_length=1)
    timestamp: StrictStr = Field(min_length=1)
    metrics: Union[list[Any], tuple[Any, ...]]
