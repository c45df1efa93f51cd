"""
backend/lotato/config_games.py

Purpose:
    Static bet catalog configuration. Defines every playable game, its number
    pattern and its payout multipliers (per lot tier or per option).
"""

LOT_TIERS = ("lot1", "lot2", "lot3")
LOTTO_OPTIONS = ("option1", "option2", "option3")
MARRIAGE_SEPARATOR = "*"

BET_TYPES: dict[str, dict] = {
    "borlette": {
        "name": "BORLETTE",
        "category": "borlette",
        "digits": 2,
        # 1st lot x60, 2nd lot x20, 3rd lot x10
        "tier_multipliers": (60, 20, 10),
        "description": "2 digits (lot1 x60, lot2 x20, lot3 x10)",
    },
    "boulpe": {
        "name": "BOUL PE",
        "category": "borlette",
        "digits": 2,
        "tier_multipliers": (60, 20, 10),
        "description": "Boul pe (00-99), pays like borlette",
    },
    "lotto3": {
        "name": "LOTO 3",
        "category": "lotto",
        "digits": 3,
        "tier_multipliers": (500,),
        "description": "3 digits, exact lot1",
    },
    "grap": {
        "name": "GRAP",
        "category": "special",
        "digits": 3,
        "repdigit": True,
        "tier_multipliers": (500,),
        "description": "Triple (111, 222, ..., 000), exact lot1",
    },
    "lotto4": {
        "name": "LOTO 4",
        "category": "lotto",
        "digits": 4,
        "option_multipliers": {"option1": 5000, "option2": 2500, "option3": 1000},
        "description": "4 digits (lot1+lot2 accumulated), 3 options",
    },
    "lotto5": {
        "name": "LOTO 5",
        "category": "lotto",
        "digits": 5,
        "option_multipliers": {"option1": 25000, "option2": 12500, "option3": 5000},
        "description": "5 digits (lot1+lot2+lot3 accumulated), 3 options",
    },
    "marriage": {
        "name": "MARYAJ",
        "category": "special",
        "digits": 2,
        "pair": True,
        "tier_multipliers": (1000,),
        "description": "Two 2-digit balls, e.g. 12*34",
    },
    "auto-marriage": {
        "name": "MARYAJ OTOMATIK",
        "category": "special",
        "digits": 2,
        "pair": True,
        "auto": True,
        "tier_multipliers": (1000,),
        "description": "Generated marriages from a ball basket",
    },
    "auto-lotto4": {
        "name": "LOTO 4 OTOMATIK",
        "category": "special",
        "digits": 4,
        "auto": True,
        "tier_multipliers": (5000,),
        "description": "Generated lotto 4, any order of lot2 and lot3",
    },
}
