from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class FormConversionRequest(BaseModel):
	currency: str = Field(..., min_length=3, max_length=3)
	amount: Decimal | str | None = Field(None, description='Raw field value as typed by the user')

	@field_validator('currency')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()

	class ConfigDict:
		json_schema_extra = {'example': {'currency': 'USD', 'amount': '100'}}
