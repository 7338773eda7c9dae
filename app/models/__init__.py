from .profile import Profile
from .bet import Bet
from .checkin import Checkin
from .support import Support
from .avatar import Avatar, UserAvatar
from .collectible import Collectible, UserCollectible
from .wall_event import WallEvent
from .ledger import LedgerEntry

__all__ = [
    "Profile",
    "Bet",
    "Checkin",
    "Support",
    "Avatar",
    "UserAvatar",
    "Collectible",
    "UserCollectible",
    "WallEvent",
    "LedgerEntry",
]
