from __future__ import annotations

import unittest
from datetime import UTC, datetime

from orders.domain.discord_format import (
    UNKNOWN_USER,
    VIEW_CHANNEL,
    build_contact_embed,
    build_deletion_embed,
    build_order_embed,
    contact_channel_name,
    order_channel_name,
    permission_overwrites,
    private_channel_body,
    to_bold_digits,
)
from orders.domain.draft import ContactNotification, DeletionNotification, NotificationRequest

NOW = datetime(2026, 3, 14, 9, 5, tzinfo=UTC)


def make_request(**overrides: object) -> NotificationRequest:
    base: dict[str, object] = {
        "order_id": "12345678",
        "site_type": "vitrine",
        "site_name": "Boulangerie Martin",
        "description": "Un site vitrine pour la boutique.",
        "full_name": "Jeanne Martin",
        "email": "jeanne@example.com",
        "primary_color": "#3B82F6",
        "secondary_color": "#9CD4E3",
        "requester_username": "jeanne",
    }
    base.update(overrides)
    return NotificationRequest(**base)  # type: ignore[arg-type]


def field_value(embed: dict[str, object], name: str) -> str:
    for field in embed["fields"]:  # type: ignore[union-attr]
        if field["name"] == name:
            return field["value"]
    raise AssertionError(f"no field named {name!r}")


def field_names(embed: dict[str, object]) -> list[str]:
    return [field["name"] for field in embed["fields"]]  # type: ignore[union-attr]


class ChannelNamingTests(unittest.TestCase):
    def test_bold_digits(self) -> None:
        self.assertEqual(to_bold_digits("0123456789"), "𝟎𝟏𝟐𝟑𝟒𝟓𝟔𝟕𝟖𝟗")
        self.assertEqual(to_bold_digits("a1"), "a𝟏")

    def test_order_channel_name_pads_to_eight_digits(self) -> None:
        self.assertEqual(order_channel_name("12345678"), "📦・𝟏𝟐𝟑𝟒𝟓𝟔𝟕𝟖")
        self.assertEqual(order_channel_name("42"), "📦・𝟎𝟎𝟎𝟎𝟎𝟎𝟒𝟐")

    def test_contact_channel_name(self) -> None:
        self.assertEqual(contact_channel_name("87654321"), "✉️・𝟖𝟕𝟔𝟓𝟒𝟑𝟐𝟏")


class PermissionTests(unittest.TestCase):
    def test_everyone_is_denied_and_member_is_allowed(self) -> None:
        overwrites = permission_overwrites("guild-1", "member-1")
        self.assertEqual(
            overwrites,
            [
                {"id": "guild-1", "type": 0, "deny": str(VIEW_CHANNEL)},
                {"id": "member-1", "type": 1, "deny": "0", "allow": "1024"},
            ],
        )

    def test_without_member_only_everyone_entry(self) -> None:
        self.assertEqual(len(permission_overwrites("guild-1", None)), 1)

    def test_private_channel_body(self) -> None:
        body = private_channel_body(
            "📦・𝟏", category_id="cat-1", guild_id="guild-1", member_id=None
        )
        self.assertEqual(body["type"], 0)
        self.assertEqual(body["parent_id"], "cat-1")
        self.assertEqual(body["name"], "📦・𝟏")


class OrderEmbedTests(unittest.TestCase):
    def test_core_fields(self) -> None:
        embed = build_order_embed(make_request(budget=800.0), now=NOW)

        self.assertEqual(embed["title"], "🏪 Boulangerie Martin")
        self.assertEqual(embed["color"], 0x3B82F6)
        self.assertEqual(embed["timestamp"], NOW.isoformat())
        self.assertEqual(field_value(embed, "🏷️ Référence Commande"), "```#12345678```")
        self.assertEqual(field_value(embed, "🏪 Type de Site"), "```Site Vitrine```")
        self.assertIn("**Discord:** jeanne", field_value(embed, "👤 Informations Client"))
        self.assertEqual(field_value(embed, "💰 Budget"), "**800€**")
        self.assertEqual(field_value(embed, "🖼️ Fichiers Joints"), "Aucun fichier")
        self.assertEqual(field_value(embed, "🕐 Reçue le"), "**14/03/2026** à **09:05**")

    def test_other_site_type_uses_free_text(self) -> None:
        embed = build_order_embed(
            make_request(site_type="other", site_type_other="Forum"), now=NOW
        )
        self.assertEqual(field_value(embed, "✨ Type de Site"), "```Forum```")

    def test_budget_text_only_and_unspecified(self) -> None:
        text_only = build_order_embed(make_request(budget_text="à discuter"), now=NOW)
        self.assertEqual(field_value(text_only, "💰 Budget"), "à discuter")

        neither = build_order_embed(make_request(), now=NOW)
        self.assertEqual(field_value(neither, "💰 Budget"), "Non spécifié")

    def test_logo_links_and_colors(self) -> None:
        embed = build_order_embed(
            make_request(
                logo_urls=("https://x.test/a.png", "https://x.test/b.png"),
                other_colors=("#111111",),
            ),
            now=NOW,
        )
        self.assertEqual(
            field_value(embed, "🖼️ Fichiers Joints"),
            "[📎 Fichier 1](https://x.test/a.png)\n[📎 Fichier 2](https://x.test/b.png)",
        )
        self.assertIn("`#111111`", field_value(embed, "🎨 Palette de Couleurs"))

    def test_long_description_is_truncated(self) -> None:
        embed = build_order_embed(make_request(description="x" * 600), now=NOW)
        self.assertEqual(
            field_value(embed, "📖 Description du Projet"), "```" + "x" * 500 + "...```"
        )

    def test_optional_sections_are_omitted(self) -> None:
        embed = build_order_embed(
            make_request(primary_color=None, secondary_color=None, requester_username=None),
            now=NOW,
        )
        self.assertNotIn("🎨 Palette de Couleurs", field_names(embed))
        self.assertNotIn("📌 Instructions Spécifiques", field_names(embed))
        self.assertIn(UNKNOWN_USER, field_value(embed, "👤 Informations Client"))


class ContactEmbedTests(unittest.TestCase):
    def test_contact_embed(self) -> None:
        contact = ContactNotification(
            name="Jeanne",
            email="jeanne@example.com",
            subject="Délais",
            message="m" * 1000,
            project_type="discord-bot",
        )
        embed = build_contact_embed(
            contact, contact_ref="87654321", requester_username=None, now=NOW
        )

        self.assertEqual(embed["title"], "🤖 Délais")
        self.assertEqual(field_value(embed, "🏷️ Référence"), "```#87654321```")
        self.assertEqual(field_value(embed, "🤖 Type de Projet"), "```Bot Discord```")
        self.assertTrue(field_value(embed, "📝 Message").endswith("m...```"))
        self.assertIn(UNKNOWN_USER, field_value(embed, "👤 Informations Client"))

    def test_unknown_project_type_falls_back_to_other(self) -> None:
        contact = ContactNotification(
            name="J", email="j@example.com", subject="S", message="M", project_type="nope"
        )
        embed = build_contact_embed(contact, contact_ref="1", requester_username="j", now=NOW)
        self.assertEqual(field_value(embed, "💡 Type de Projet"), "```Autre Projet```")


class DeletionEmbedTests(unittest.TestCase):
    def test_admin_deletion_of_order(self) -> None:
        deletion = DeletionNotification(item_type="order", item_id="abcdef123456")
        embed = build_deletion_embed(deletion, deleted_by="boss", is_admin=True, now=NOW)

        self.assertEqual(embed["title"], "📦 Commande Supprimé(e)")
        self.assertEqual(embed["color"], 0xDC2626)
        self.assertEqual(field_value(embed, "🔖 Référence"), "```#ABCDEF12```")
        self.assertEqual(field_value(embed, "👑 Exécuté par"), "**boss**\n`Administrateur`")

    def test_user_deletion_of_unknown_item_type(self) -> None:
        deletion = DeletionNotification(item_type="invoice", item_id="1")
        embed = build_deletion_embed(deletion, deleted_by=None, is_admin=False, now=NOW)

        self.assertEqual(embed["color"], 0xEF4444)
        self.assertEqual(
            field_value(embed, "👤 Exécuté par"), f"**{UNKNOWN_USER}**\n`Utilisateur`"
        )


if __name__ == "__main__":
    unittest.main()
