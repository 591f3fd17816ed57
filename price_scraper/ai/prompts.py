"""Prompt and response schema for AI product extraction."""

from typing import Optional

from pydantic import BaseModel, Field

SYSTEM_PROMPT = (
    "You extract product information from e-commerce page HTML. "
    "Return only data that is present on the page."
)

EXTRACTION_PROMPT = """Extract product information from this HTML.
Find the product title, current price (as a number without currency symbol), currency code, and main product image URL.

Instructions:
- If there are multiple prices, extract the main/current/discounted selling price. It is not the original price, not a unit price and not a crossed-out price.
- For imageUrl, extract the main product image URL (look for <img> tags with src or data-src attributes, or JSON-LD "image").
- The imageUrl must be a complete URL starting with https:// (not a relative path like /images/product.jpg). Page URL: {url}
- Use null for any field you cannot find.

HTML content:
{html}"""


class ProductExtraction(BaseModel):
    """Structured output returned by the model."""

    title: Optional[str] = Field(default=None, description="The product name/title")
    price: Optional[float] = Field(
        default=None,
        description="The current price as a decimal number in major units (e.g., 19.99)",
    )
    currency: Optional[str] = Field(
        default=None,
        description="The ISO 4217 currency code (USD, EUR, GBP, NZD, AUD, etc.)",
    )
    imageUrl: Optional[str] = Field(
        default=None,
        description="The main product image URL (full URL with https://, not relative path)",
    )


def build_extraction_prompt(url: str, html: str) -> str:
    """Build the user prompt for a prepared HTML excerpt."""
    return EXTRACTION_PROMPT.format(url=url, html=html)


def product_json_schema() -> dict:
    """JSON schema for providers that take a raw schema (strict mode compatible)."""
    return {
        "type": "object",
        "properties": {
            "title": {"type": ["string", "null"], "description": "The product name/title"},
            "price": {
                "type": ["number", "null"],
                "description": "The current price as a decimal number in major units (e.g., 19.99)",
            },
            "currency": {
                "type": ["string", "null"],
                "description": "The ISO 4217 currency code (USD, EUR, GBP, etc.)",
            },
            "imageUrl": {
                "type": ["string", "null"],
                "description": "The main product image URL (full URL with https://)",
            },
        },
        "required": ["title", "price", "currency", "imageUrl"],
        "additionalProperties": False,
    }
