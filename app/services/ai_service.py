from typing import Optional

from anthropic import Anthropic

from app.config import Settings
from app.log import get_logger
from app.models.mission import Mission
from app.models.restaurant import Restaurant

logger = get_logger(__name__)

CAPTION_SYSTEM_PROMPT = """Tu es un créateur de contenu Instagram pour restaurants : ton authentique, direct, sans blabla.

STYLE :
- Parle comme un pote, pas comme une pub
- Phrases courtes et punchy
- Emojis : 0 à 2 max, jamais à la suite
- Tutoie toujours

STRUCTURE :
- Hook en première ligne (question, provoc légère, constat)
- 1-2 phrases max après
- Exactement 2-3 hashtags à la fin, dont 1 hashtag ville

INTERDIT :
- "Venez découvrir", "N'hésitez pas", "Notre équipe", "Régalez-vous"
- Méta-commentaires ("Voici...", "Je vais...")

Retourne UNIQUEMENT la légende."""


class AIService:
    """Caption suggestions through Claude"""

    def __init__(self, settings: Settings, client: Optional[Anthropic] = None):
        self.model = settings.claude_model
        self.api_key = settings.anthropic_api_key
        self.client = client
        if self.client is None and self.api_key:
            self.client = Anthropic(api_key=self.api_key)

    def is_configured(self) -> bool:
        return self.client is not None

    def build_caption_prompt(
        self,
        mission: Mission,
        restaurant: Optional[Restaurant] = None,
        user_context: Optional[str] = None,
    ) -> str:
        template = mission.mission_template
        resto = ""
        if restaurant:
            resto = f" {restaurant.name}"
            if restaurant.type:
                resto += f" ({restaurant.type})"
            if restaurant.city:
                resto += f" à {restaurant.city}"

        prompt = (
            "Écris une légende Instagram.\n\n"
            f"RESTO:{resto}\n\n"
            f"CONTENU: {template.type} - {template.title}\n"
            f"THÈME: {template.content_idea or ''}"
        )
        if user_context and user_context.strip():
            prompt += (
                "\n\nCONTEXTE (fourni par l'utilisateur):\n"
                f'"{user_context.strip()}"\n\n'
                "Intègre ces informations naturellement dans la légende."
            )
        return prompt

    def suggest_caption(
        self,
        mission: Mission,
        restaurant: Optional[Restaurant] = None,
        user_context: Optional[str] = None,
    ) -> Optional[str]:
        """
        Suggest an Instagram caption for a mission.

        Returns None when no API key is configured or the call fails.
        """
        if not self.is_configured():
            logger.info("event=ai.not_configured | mission_id=%s", mission.id)
            return None

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=200,
                system=CAPTION_SYSTEM_PROMPT,
                messages=[
                    {"role": "user", "content": self.build_caption_prompt(mission, restaurant, user_context)}
                ],
            )
            caption = response.content[0].text.strip()
        except Exception:
            logger.exception("event=ai.caption_failed | mission_id=%s", mission.id)
            return None

        return caption or None
