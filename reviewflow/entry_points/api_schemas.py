import pydantic

from reviewflow.store.api_schemas import BaseRequestSchema, WriteResponse


class EntryPointRequest(BaseRequestSchema):
    label: str = pydantic.Field(
        description="Display name of the entry point", examples=["Table 1"]
    )
    src: str = pydantic.Field(
        description="Source tag used as ?src=... Whitespace becomes underscores.",
        examples=["table 1"],
    )


class EntryPointResponse(BaseRequestSchema):
    id: str
    label: str
    src: str
    link: str = pydantic.Field(description="Customer link tagged with this source")


class EntryPointWriteResponse(WriteResponse):
    entry_point: EntryPointResponse
