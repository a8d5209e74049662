"""Discord message content for order, contact and deletion notifications.

Domain rules only:
- how a channel is named for an order or a contact request
- who may see a freshly created channel
- what the embed posted into it contains
No HTTP calls happen here; see `adapters.discord_rest`.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ..types import Embed
from .draft import ContactNotification, DeletionNotification, NotificationRequest

VIEW_CHANNEL = 1024
GUILD_TEXT_CHANNEL = 0
OVERWRITE_ROLE = 0
OVERWRITE_MEMBER = 1

ORDER_CHANNEL_PREFIX = "📦・"
CONTACT_CHANNEL_PREFIX = "✉️・"
LOGO_URL = "https://i.ibb.co/4nXx45XS/Logo.png"
UNKNOWN_USER = "Utilisateur inconnu"
ZERO_WIDTH = "​"
TEXT_LIMIT = 500
CONTACT_MESSAGE_LIMIT = 900

_BOLD_DIGITS = str.maketrans("0123456789", "𝟎𝟏𝟐𝟑𝟒𝟓𝟔𝟕𝟖𝟗")

SITE_TYPE_LABELS: dict[str, tuple[str, str]] = {
    "vitrine": ("Site Vitrine", "🏪"),
    "ecommerce": ("E-commerce", "🛒"),
    "dashboard": ("Dashboard", "📊"),
    "portfolio": ("Portfolio", "🎨"),
    "landing": ("Landing Page", "🚀"),
    "community": ("Site Communautaire", "👥"),
    "webapp": ("Application Web", "💻"),
    "other": ("Autre", "✨"),
}

PROJECT_TYPE_LABELS: dict[str, tuple[str, str]] = {
    "website": ("Site Internet", "🌐"),
    "discord-bot": ("Bot Discord", "🤖"),
    "both": ("Site + Bot Discord", "✨"),
    "other": ("Autre Projet", "💡"),
}

DELETED_TYPE_LABELS: dict[str, tuple[str, str, int]] = {
    "order": ("Commande", "📦", 0xDC2626),
    "contact": ("Message de Contact", "📬", 0xF97316),
}


def to_bold_digits(text: str) -> str:
    return text.translate(_BOLD_DIGITS)


def order_channel_name(order_id: str) -> str:
    return f"{ORDER_CHANNEL_PREFIX}{to_bold_digits(order_id.zfill(8))}"


def contact_channel_name(contact_ref: str) -> str:
    return f"{CONTACT_CHANNEL_PREFIX}{to_bold_digits(contact_ref.zfill(8))}"


def permission_overwrites(guild_id: str, member_id: str | None) -> list[dict[str, Any]]:
    """Hide the channel from @everyone (its role id is the guild id), show it to `member_id`."""
    overwrites: list[dict[str, Any]] = [
        {"id": guild_id, "type": OVERWRITE_ROLE, "deny": str(VIEW_CHANNEL)},
    ]
    if member_id:
        overwrites.append(
            {"id": member_id, "type": OVERWRITE_MEMBER, "deny": "0", "allow": str(VIEW_CHANNEL)}
        )
    return overwrites


def private_channel_body(
    name: str, *, category_id: str, guild_id: str, member_id: str | None
) -> dict[str, Any]:
    return {
        "name": name,
        "type": GUILD_TEXT_CHANNEL,
        "parent_id": category_id,
        "permission_overwrites": permission_overwrites(guild_id, member_id),
    }


def build_order_embed(request: NotificationRequest, *, now: datetime | None = None) -> Embed:
    moment = now or datetime.now(tz=UTC)
    label, icon = _site_type_label(request.site_type, request.site_type_other)

    fields: list[dict[str, Any]] = [
        _frame("╔═════════════════════════╗"),
        _field("🏷️ Référence Commande", f"```#{request.order_id}```", inline=True),
        _field(f"{icon} Type de Site", f"```{label}```", inline=True),
        _field("🌐 Nom du Site", f"```{request.site_name or 'Non spécifié'}```", inline=True),
        _field(
            "👤 Informations Client",
            f">>> **Nom:** {request.full_name}\n**Email:** {request.email}\n"
            f"**Discord:** {request.requester_username or UNKNOWN_USER}",
        ),
    ]

    colors = _colors_display(request)
    if colors:
        fields.append(_field("🎨 Palette de Couleurs", colors, inline=True))
    fields.append(_field("💰 Budget", _budget_display(request), inline=True))
    fields.append(_field("🖼️ Fichiers Joints", _logos_display(request.logo_urls), inline=True))
    if request.specific_instructions:
        fields.append(
            _field(
                "📌 Instructions Spécifiques",
                f"```{_truncate(request.specific_instructions, TEXT_LIMIT)}```",
            )
        )
    if request.description:
        fields.append(
            _field("📖 Description du Projet", f"```{_truncate(request.description, TEXT_LIMIT)}```")
        )
    fields.append(_field("🕐 Reçue le", _received_at(moment)))
    fields.append(_frame("╚═════════════════════════╝"))

    return _embed(
        author="🆕 NOUVELLE COMMANDE REÇUE",
        title=f"{icon} {request.site_name or 'Nouveau Projet Web'}",
        color=0x3B82F6,
        description=(
            "> Une nouvelle commande de site web a été soumise.\n"
            "> **Analyse et devis à préparer.**"
        ),
        fields=fields,
        footer="WifiRic • Système de Commandes",
        moment=moment,
    )


def build_contact_embed(
    contact: ContactNotification,
    *,
    contact_ref: str,
    requester_username: str | None,
    now: datetime | None = None,
) -> Embed:
    moment = now or datetime.now(tz=UTC)
    label, icon = PROJECT_TYPE_LABELS.get(contact.project_type, PROJECT_TYPE_LABELS["other"])
    fields = [
        _frame("╔══════════════════════════════════════╗"),
        _field("🏷️ Référence", f"```#{contact_ref}```", inline=True),
        _field(f"{icon} Type de Projet", f"```{label}```", inline=True),
        _field(ZERO_WIDTH, ZERO_WIDTH, inline=True),
        _field(
            "👤 Informations Client",
            f">>> **Nom:** {contact.name}\n**Email:** {contact.email}\n"
            f"**Discord:** {requester_username or UNKNOWN_USER}",
        ),
        _field("📝 Message", f"```{_truncate(contact.message, CONTACT_MESSAGE_LIMIT)}```"),
        _field("🕐 Reçu le", _received_at(moment)),
        _frame("╚══════════════════════════════════════╝"),
    ]
    return _embed(
        author="📨 NOUVEAU MESSAGE DE CONTACT",
        title=f"{icon} {contact.subject}",
        color=0x10B981,
        description=(
            "> Un nouveau message de contact a été reçu.\n> **Réponse attendue sous 48h.**"
        ),
        fields=fields,
        footer="WifiRic • Système de Contact",
        moment=moment,
    )


def build_deletion_embed(
    deletion: DeletionNotification,
    *,
    deleted_by: str | None,
    is_admin: bool,
    now: datetime | None = None,
) -> Embed:
    moment = now or datetime.now(tz=UTC)
    label, icon, color = DELETED_TYPE_LABELS.get(deletion.item_type, ("Élément", "📄", 0xEF4444))
    role_label, role_icon = ("Administrateur", "👑") if is_admin else ("Utilisateur", "👤")
    fields = [
        _frame("╔══════════════════════════╗"),
        _field("🔖 Référence", f"```#{deletion.item_id[:8].upper()}```", inline=True),
        _field("📂 Type", f"```{label}```", inline=True),
        _field(ZERO_WIDTH, ZERO_WIDTH, inline=True),
        _field(
            f"{role_icon} Exécuté par",
            f"**{deleted_by or UNKNOWN_USER}**\n`{role_label}`",
            inline=True,
        ),
        _field(
            "🕐 Date & Heure",
            f"**{moment.strftime('%d/%m/%Y')}**\n`{moment.strftime('%H:%M')}`",
            inline=True,
        ),
        _field(ZERO_WIDTH, ZERO_WIDTH, inline=True),
        _frame("╚══════════════════════════╝"),
    ]
    return _embed(
        author="⚠️ NOTIFICATION DE SUPPRESSION",
        title=f"{icon} {label} Supprimé(e)",
        color=color,
        description=(
            "> Un élément a été supprimé de la base de données.\n"
            "> Cette action est **irréversible**."
        ),
        fields=fields,
        footer="WifiRic • Système de Gestion",
        moment=moment,
    )


def _site_type_label(site_type: str, site_type_other: str | None) -> tuple[str, str]:
    if site_type == "other" and site_type_other:
        return site_type_other, "✨"
    return SITE_TYPE_LABELS.get(site_type, SITE_TYPE_LABELS["other"])


def _colors_display(request: NotificationRequest) -> str:
    lines: list[str] = []
    if request.primary_color:
        lines.append(f"🔵 Primaire: `{request.primary_color}`")
    if request.secondary_color:
        lines.append(f"🟣 Secondaire: `{request.secondary_color}`")
    if request.other_colors:
        lines.append("🎨 Autres: " + " ".join(f"`{color}`" for color in request.other_colors))
    return "\n".join(lines)


def _budget_display(request: NotificationRequest) -> str:
    if request.budget:
        text = f"**{request.budget:g}€**"
        if request.budget_text:
            text += f"\n_{request.budget_text}_"
        return text
    if request.budget_text:
        return request.budget_text
    return "Non spécifié"


def _logos_display(logo_urls: tuple[str, ...]) -> str:
    urls = [url for url in logo_urls if url]
    if not urls:
        return "Aucun fichier"
    return "\n".join(f"[📎 Fichier {index}]({url})" for index, url in enumerate(urls, start=1))


def _truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def _received_at(moment: datetime) -> str:
    return f"**{moment.strftime('%d/%m/%Y')}** à **{moment.strftime('%H:%M')}**"


def _field(name: str, value: str, *, inline: bool = False) -> dict[str, Any]:
    return {"name": name, "value": value, "inline": inline}


def _frame(name: str) -> dict[str, Any]:
    return _field(name, ZERO_WIDTH)


def _embed(
    *,
    author: str,
    title: str,
    color: int,
    description: str,
    fields: list[dict[str, Any]],
    footer: str,
    moment: datetime,
) -> Embed:
    return {
        "author": {"name": author, "icon_url": LOGO_URL},
        "title": title,
        "color": color,
        "description": description,
        "fields": fields,
        "thumbnail": {"url": LOGO_URL},
        "footer": {"text": footer, "icon_url": LOGO_URL},
        "timestamp": moment.isoformat(),
    }
