from enum import Enum


class Channel(str, Enum):
    INAPP = "inapp"          # persisted Notification row
    REALTIME = "realtime"    # websocket push to the user's room
