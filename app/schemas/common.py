from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# 요청 본문은 camelCase(mobileNumber) / snake_case(mobile_number) 둘 다 허용
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
