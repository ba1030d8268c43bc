# Import all models here to ensure they are registered with Base
from .user import User
from .team import Team
from .invitation import Invitation
from .event import Event
from .player_match_stats import PlayerMatchStats
from .match_stats import MatchStats
from .announcement import Announcement
from .notification import Notification
from .message import Message
