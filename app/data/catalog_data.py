"""
Reference catalog: levels, XP rewards, badges, tutorials, strategies and
mission templates.

Loaded by app/scripts/seed_catalog.py. Tutorials are referenced by their key
so templates can point at them before ids exist.
"""

LEVELS = [
    {"level": 1, "xp_required": 0, "name": "Débutant", "icon": "🌱"},
    {"level": 2, "xp_required": 50, "name": "Apprenti", "icon": "🌿"},
    {"level": 3, "xp_required": 150, "name": "Curieux", "icon": "🌲"},
    {"level": 4, "xp_required": 300, "name": "Motivé", "icon": "🌳"},
    {"level": 5, "xp_required": 500, "name": "Régulier", "icon": "⭐"},
    {"level": 6, "xp_required": 750, "name": "Engagé", "icon": "🌟"},
    {"level": 7, "xp_required": 1000, "name": "Expert", "icon": "💫"},
    {"level": 8, "xp_required": 1500, "name": "Maître", "icon": "🏆"},
    {"level": 9, "xp_required": 2000, "name": "Légende", "icon": "👑"},
    {"level": 10, "xp_required": 3000, "name": "Le Phare", "icon": "🔥"},
]

XP_ACTIONS = [
    {"action_type": "mission_completed", "xp_amount": 10, "description": "Mission complétée"},
    {"action_type": "tutorial_completed", "xp_amount": 5, "description": "Tutoriel regardé"},
    {"action_type": "streak_day", "xp_amount": 2, "description": "Jour de streak"},
    {"action_type": "first_mission", "xp_amount": 20, "description": "Première mission"},
    {"action_type": "first_tutorial", "xp_amount": 10, "description": "Premier tutoriel"},
    {"action_type": "weekly_streak", "xp_amount": 15, "description": "7 jours de suite"},
    {"action_type": "badge_earned", "xp_amount": 25, "description": "Badge débloqué"},
]

BADGES = [
    # Missions (kitchen hierarchy)
    {"name": "Commis", "slug": "commis", "description": "Complète 5 missions", "icon": "👨‍🍳",
     "criteria_type": "missions_completed", "criteria_value": 5, "order": 1},
    {"name": "Sous-chef", "slug": "sous-chef", "description": "Complète 20 missions", "icon": "🍳",
     "criteria_type": "missions_completed", "criteria_value": 20, "order": 2},
    {"name": "Chef", "slug": "chef", "description": "Complète 50 missions", "icon": "👨‍🍳",
     "criteria_type": "missions_completed", "criteria_value": 50, "order": 3},
    {"name": "Chef Étoilé", "slug": "chef-etoile", "description": "Complète 100 missions", "icon": "⭐",
     "criteria_type": "missions_completed", "criteria_value": 100, "order": 4},
    # Streaks
    {"name": "Régulier", "slug": "regulier", "description": "Maintiens un streak de 7 jours", "icon": "🔥",
     "criteria_type": "streak_days", "criteria_value": 7, "order": 5},
    {"name": "Assidu", "slug": "assidu", "description": "Maintiens un streak de 14 jours", "icon": "💪",
     "criteria_type": "streak_days", "criteria_value": 14, "order": 6},
    {"name": "Machine", "slug": "machine", "description": "Maintiens un streak de 30 jours", "icon": "🚀",
     "criteria_type": "streak_days", "criteria_value": 30, "order": 7},
    # Tutorials
    {"name": "Curieux", "slug": "curieux", "description": "Regarde 3 tutoriels", "icon": "📚",
     "criteria_type": "tutorials_viewed", "criteria_value": 3, "order": 8},
    {"name": "Apprenti", "slug": "apprenti", "description": "Regarde 10 tutoriels", "icon": "🎓",
     "criteria_type": "tutorials_viewed", "criteria_value": 10, "order": 9},
    {"name": "Expert", "slug": "expert", "description": "Regarde 20 tutoriels", "icon": "🧠",
     "criteria_type": "tutorials_viewed", "criteria_value": 20, "order": 10},
]

TUTORIALS = [
    {"key": "photo-plat", "title": "Photographier un plat à la lumière naturelle"},
    {"key": "reel-30s", "title": "Monter un réel de 30 secondes"},
    {"key": "repondre-avis", "title": "Répondre aux commentaires et avis"},
]

STRATEGIES = [
    {
        "slug": "ouverture",
        "name": "Ouverture de resto",
        "description": "Créer l'attente avant l'ouverture",
    },
    {
        "slug": "notoriete",
        "name": "Faire connaître",
        "description": "Attirer de nouveaux clients",
    },
]

# strategy slug -> templates; tutorial / required_tutorial refer to TUTORIALS keys
MISSION_TEMPLATES = {
    "ouverture": [
        {"type": "post", "title": "Les coulisses du chantier",
         "content_idea": "Montrez l'avancement des travaux. Les gens adorent suivre une transformation !"},
        {"type": "story", "title": "Teasing de votre carte",
         "content_idea": "Présentez un plat signature que vous préparez pour l'ouverture."},
        {"type": "post", "title": "Présentation de l'équipe",
         "content_idea": "Présentez-vous avec votre équipe, les clients aiment connaître les visages."},
        {"type": "reel", "title": "Countdown vers l'ouverture",
         "content_idea": "Un réel dynamique avec un compte à rebours vers le grand jour.",
         "required_tutorial": "reel-30s"},
        {"type": "engagement", "title": "Répondre à vos premiers abonnés",
         "content_idea": "Remerciez en commentaire les personnes qui suivent déjà l'aventure."},
        {"type": "tuto", "title": "Tuto : le réel de 30 secondes",
         "content_idea": "Apprenez à monter un réel court avant votre countdown.",
         "tutorial": "reel-30s"},
    ],
    "notoriete": [
        {"type": "post", "title": "Plat du jour en vedette",
         "content_idea": "Mettez en valeur votre plat du jour avec une photo appétissante.",
         "notification_time": "11:00"},
        {"type": "story", "title": "Dans les coulisses de la cuisine",
         "content_idea": "Montrez la préparation d'un plat en cuisine. L'authenticité attire !"},
        {"type": "post", "title": "Avis client à partager",
         "content_idea": "Partagez un avis positif d'un client, avec sa permission."},
        {"type": "reel", "title": "Recette signature en vidéo",
         "content_idea": "La préparation de votre plat signature en accéléré.",
         "required_tutorial": "reel-30s"},
        {"type": "story", "title": "Promotion spéciale",
         "content_idea": "Annoncez une offre ou un menu découverte."},
        {"type": "engagement", "title": "Commenter chez vos voisins",
         "content_idea": "Laissez un commentaire sincère sur 3 comptes de commerçants du quartier."},
        {"type": "engagement", "title": "Répondre aux avis",
         "content_idea": "Répondez aux derniers avis Google et Instagram.",
         "required_tutorial": "repondre-avis"},
        {"type": "tuto", "title": "Tuto : photo de plat",
         "content_idea": "Les bases de la photo culinaire à la lumière du jour.",
         "tutorial": "photo-plat"},
        {"type": "tuto", "title": "Tuto : répondre aux avis",
         "content_idea": "Transformer un avis en conversation.",
         "tutorial": "repondre-avis"},
    ],
}
