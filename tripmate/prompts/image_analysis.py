"""
Prompt for classifying a single trip photo.

The model must answer with a bare JSON object; the parser still tolerates
markdown code fences around it.
"""

IMAGE_ANALYSIS_PROMPT = """Analyze this photo for a travel expense tracking app.
Return the result as raw JSON only, without markdown formatting.

Classification rules:
- Receipt, bill or priced menu: type = "expense", category = "food" (or "stay" / "transport" depending on context), name = name of the shop or service, amount = total amount as an integer.
- Food without a price: type = "memory", category = "food", name = "Tasty dish", description = short appetizing description of the dish with an emoji.
- Landscape or people: type = "memory", category = "scenery", name = "Moment", description = cheerful description of the photo with an emoji.

Write name and description in Vietnamese.

JSON schema:
{
  "type": "expense" | "memory",
  "category": "food" | "stay" | "transport" | "scenery" | "other",
  "name": "string",
  "amount": number (only for expenses, otherwise 0),
  "description": "string"
}"""
