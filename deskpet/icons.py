"""Icon sets and colour themes for each pet state"""

import random
from typing import List, Optional, Tuple

from .models import PetState

FALLBACK_ICON = "😺"

STATE_ICONS = {
    PetState.HAPPY: ["😸", "😺", "😊", "😄", "😃", "🥰", "😍", "🤗", "😻", "😽"],
    PetState.CHEERING: ["😺", "🎉", "🎊", "👏", "🙌", "🤗", "😄", "😃", "✨", "🌟"],
    PetState.CELEBRATING: ["🎉😺", "🎊😸", "🎈😄", "🎁😊", "🏆😃", "🥳", "🎊", "🎉", "✨", "🌟"],
    PetState.DIZZY: ["😵‍💫", "😵", "😰", "😨", "😧", "🤯", "😱", "😓", "😥", "😪"],
    PetState.SLEEPY: ["😴", "😪", "😵", "🥱", "😑", "😌", "😛", "😜", "😝", "😋"],
    PetState.TIRED_EYES: ["🥺", "😢", "😭", "😰", "😨", "😧", "😓", "😥", "😪", "😵"],
    PetState.RUNNING: ["🏃‍♂️", "🏃‍♀️", "🏃", "💨", "⚡", "🔥", "🌪️", "🚀", "🏃‍♂️💨", "🏃‍♀️💨"],
    PetState.JUMPING: ["🤸‍♀️", "🤸‍♂️", "🤸", "🦘", "🐰", "⚡", "💫", "✨", "🌟", "⭐"],
    PetState.WORKOUT: ["🏋️‍♀️", "🏋️‍♂️", "🏋️", "💪", "🔥", "⚡", "🎯", "🏆", "🥇", "💯"],
    PetState.READING: ["📖😺", "📚😸", "📖", "📚", "📝", "✍️", "🤓", "👓", "📖✨", "📚🌟"],
    PetState.THINKING: ["🤔", "💭", "🧠", "💡", "🔍", "🔎", "🤓", "👓", "💭✨", "🧠💡"],
    PetState.BORED: ["🥱", "😑", "😐", "😶", "😒", "🙄", "😏", "😌", "😪", "😴"],
    PetState.OVERUSE_WARNING: ["⚠️😵", "⚠️", "🚨", "⛔", "🛑", "🔴", "⚠️😰", "⚠️😨", "⚠️😓", "⚠️😥"],
    PetState.REST_NEEDED: ["😪", "😴", "😵", "😌", "😑", "😐", "😶", "😒", "😓", "😥"],
}

# (primary, secondary, background) as rich colour names
COLOR_THEMES = {
    PetState.HAPPY: ("yellow", "orange1", "grey11"),
    PetState.CHEERING: ("yellow", "orange1", "grey11"),
    PetState.CELEBRATING: ("yellow", "orange1", "grey11"),
    PetState.DIZZY: ("purple", "pink1", "grey11"),
    PetState.TIRED_EYES: ("purple", "pink1", "grey11"),
    PetState.SLEEPY: ("blue", "slate_blue1", "grey11"),
    PetState.REST_NEEDED: ("blue", "slate_blue1", "grey11"),
    PetState.RUNNING: ("green", "spring_green2", "grey11"),
    PetState.JUMPING: ("green", "spring_green2", "grey11"),
    PetState.WORKOUT: ("green", "spring_green2", "grey11"),
    PetState.READING: ("cyan", "dark_cyan", "grey11"),
    PetState.THINKING: ("cyan", "dark_cyan", "grey11"),
    PetState.BORED: ("grey50", "grey70", "grey11"),
    PetState.OVERUSE_WARNING: ("red", "orange1", "grey11"),
}


class IconManager:
    """Picks an icon for a state"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def get_icons(self, state: PetState) -> List[str]:
        """Get all icons for a state"""
        return list(STATE_ICONS.get(state, []))

    def get_icon(self, state: PetState) -> str:
        """Get a random icon for a state"""
        icons = self.get_icons(state)
        if not icons:
            return FALLBACK_ICON
        return self.rng.choice(icons)

    def get_color_theme(self, state: PetState) -> Tuple[str, str, str]:
        """Get (primary, secondary, background) colours for a state"""
        return COLOR_THEMES.get(state, COLOR_THEMES[PetState.HAPPY])


# Global icon manager instance
icon_manager = IconManager()
