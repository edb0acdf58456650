"""
Prompt text for the vision and synthesis calls.

Wording can be tuned freely; the pipeline only relies on the replies
containing a JSON object with the documented top-level keys.
"""
from __future__ import annotations

import json

VISION_PROMPT = """You are analyzing the image of a packaged product. Analyze the image for branding and product identification, and for detailed nutrition and ingredient information.

Return only JSON with fields:
{
  "product_name": string|null,
  "brand": string|null,
  "net_weight": string|null,
  "barcode_or_upc": string|null,
  "visible_text": string[],
  "confidence": "high"|"medium"|"low"
}"""

SYNTHESIS_SYSTEM_PROMPT = """You are a comprehensive nutrition and testosterone optimization expert. Analyze the product data and detailed web content to provide accurate analysis.

Return ONLY valid JSON with this exact structure:
{
  "status": true,
  "message": null,
  "data": {
    "product_info": {
      "product_name": "string",
      "brand": "string",
      "net_weight": "string",
      "barcode_or_upc": "string",
      "visible_text": ["string"]
    },
    "nutrition_facts": {
      "serving_size": "string",
      "calories": "string",
      "total_fat": "string",
      "saturated_fat": "string",
      "trans_fat": "string",
      "cholesterol": "string",
      "sodium": "string",
      "total_carbohydrate": "string",
      "dietary_fiber": "string",
      "total_sugars": "string",
      "added_sugars": "string",
      "protein": "string",
      "vitamin_d": "string",
      "calcium": "string",
      "iron": "string",
      "potassium": "string"
    },
    "ingredients": [
      {
        "text": "ingredient name",
        "testosterone_impact": "positive|negative|neutral",
        "notes": "brief explanation"
      }
    ],
    "allergens": ["string"],
    "seed_oils": ["list of oils used"],
    "processed_profile": {
      "score": number (1-10, where 1 is minimal processing, 10 is highly processed),
      "level": "Low|Medium|High",
      "added_synthetic_sugars": ["list of added or synthetic sugars"],
      "additives": ["list of additives"],
      "refined_carbs": ["list of refined carbohydrates"]
    },
    "estrogenic_compounds": ["list of estrogenic compounds"],
    "microplastics": ["list of microplastics if any"],
    "t_score_impact": {
      "label": "Optimized|Moderate|Poor",
      "score_perc": number (0-100),
      "macro_balance": "Good|Fair|Poor",
      "hormone_disruptor": number (0-2, where 0 is no, 1 is mild, 2 is high)
    },
    "macros": {
      "protein_g": number,
      "carbs": {
        "fiber_g": number,
        "sugar_g": number,
        "added_sugar_g": number
      },
      "fats": {
        "saturated_g": number,
        "trans_g": number
      },
      "cholesterol_mg": number
    },
    "sources": [
      {
        "title": "string",
        "url": "string",
        "content_summary": "string",
        "used_for": ["nutrition", "ingredients", "testosterone", or "other"]
      }
    ]
  }
}

Guidelines:
- Analyze the image data and detailed web content
- Use the scraped page content for accurate nutrition information
- Identify seed oils (soybean, canola, sunflower, cottonseed, etc.)
- Assess processing level based on ingredients and additives
- Identify estrogenic compounds (BPA, phthalates, etc.)
- Check for microplastics in packaging or ingredients
- Calculate macro balance based on protein, carbs, and fats
- Provide comprehensive testosterone impact assessment
- Use scientific knowledge and detailed web content for accurate analysis"""

_SYNTHESIS_USER_TEMPLATE = """Analyze this product comprehensively using the image data and detailed web content:

Product Data from Image:
{product_json}

Detailed Web Content (Scraped from top search results):
{context}

Please provide comprehensive analysis including nutrition facts, ingredients analysis, processing assessment, and testosterone impact. Use the detailed web content to provide accurate and specific information. Return your response as JSON."""


def build_synthesis_user_prompt(product: dict, context: str) -> str:
    return _SYNTHESIS_USER_TEMPLATE.format(
        product_json=json.dumps(product, indent=2, ensure_ascii=False),
        context=context,
    )
