from enum import Enum


class Exposure(str, Enum):
    LONG = "LONG"
    FLAT = "FLAT"


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Outcome(str, Enum):
    WON = "WON"
    LOSS = "LOSS"
