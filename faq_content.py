# -*- coding: utf-8 -*-
# (topic, button custom_id, label); order is the button order
FAQ_BUTTONS = [
    ("rules", "faq_rules", "Instruction"),
    ("requirement", "faq_requirement", "Requirement"),
    ("loadout", "faq_loadout", "Loadout"),
]

FAQ_TEXT = {
    "rules": (
        "## INSTRUCTIONS\n\n"
        "✅ **Make sure to wait for the tryout team to @ you and be patient.**\n\n"
        "🔗 **Please join through the link given or add the player for your tryouts.**\n\n"
        "🏆 **If you win against the tryout manager you're in the clan.**"
    ),
    "requirement": (
        "## REQUIREMENTS\n\n"
        "**MUST BE 150+ LV ACCOUNT**\n\n"
        "**Rank:**\n"
        "• PLAT 1 OR HIGHER FOR PC\n"
        "• GOLD 2 FOR PHONE PLAYERS\n\n"
        "📸 **PLEASE MAKE SURE TO TAKE A PICTURE OF THE ACCOUNT YOU'RE GOING TO PLAY TRYOUTS.**\n"
        "Managers will ask you for your profile stats so make sure to keep it ready."
    ),
    "loadout": (
        "## LOADOUT\n\n"
        "1. **DL (Default Loadout)**\n"
        "          • Primary: AR\n"
        "          • Secondary: Handgun\n"
        "          • Melee: Fists\n"
        "          • Utility: Grenade\n\n"
        "2. **CL (Custom Loadout)**\n"
        "          • Anything is allowed\n"
        "          • Pay to Win items are not allowed\n\n"
        "3. **SRL (Sniper Restricted Loadout)**\n"
        "           • Primary: Sniper\n"
        "           • Secondary: Handgun / Revolver\n"
        "           • Melee: Fists / Scythe\n"
        "           • Utility: Grenade / Warhorn"
    ),
}

WELCOME_TITLE = "Hello {name}"
WELCOME_DESCRIPTION = (
    "Welcome to support! Read **all three** sections below "
    "(Instruction, Requirement, Loadout) to unlock the chat."
)

PANEL_TITLE = "tryout ticket"
PANEL_DESCRIPTION = "Click the button below to create a ticket."
