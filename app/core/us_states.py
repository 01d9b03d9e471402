"""
US state table keyed by USGS state id.

Each entry carries the USGS place id of the state itself, the postal
abbreviation, and the spoken/written variants recognised in transcripts.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from app.core.entity_models import StateInfo


DC_STATE_ID = 11
WA_STATE_ID = 53

_STATES = (
    StateInfo(1, 1779775, "AL", ("Alabama", "State of Alabama")),
    StateInfo(2, 1785533, "AK", ("Alaska", "State of Alaska")),
    StateInfo(4, 1779777, "AZ", ("Arizona", "State of Arizona")),
    StateInfo(5, 68085, "AR", ("Arkansas", "Ark.", "State of Arkansas")),
    StateInfo(6, 1779778, "CA", ("California", "Calif.", "State of California")),
    StateInfo(8, 1779779, "CO", ("Colorado", "Colo.", "State of Colorado")),
    StateInfo(9, 1779780, "CT", ("Connecticut", "Conn.", "State of Connecticut")),
    StateInfo(10, 1779781, "DE", ("Delaware", "Dela.", "Del.", "State of Delaware")),
    StateInfo(
        11,
        1702382,
        "DC",
        ("District of Columbia", "D.C.", "the District of Columbia"),
    ),
    StateInfo(12, 294478, "FL", ("Florida", "Fla.", "State of Florida")),
    StateInfo(13, 1705317, "GA", ("Georgia", "State of Georgia")),
    StateInfo(15, 1779782, "HI", ("Hawaii", "State of Hawaii")),
    StateInfo(16, 1779783, "ID", ("Idaho", "State of Idaho")),
    StateInfo(17, 1779784, "IL", ("Illinois", "Ill.", "State of Illinois")),
    StateInfo(18, 448508, "IN", ("Indiana", "State of Indiana")),
    StateInfo(19, 1779785, "IA", ("Iowa", "State of Iowa")),
    StateInfo(20, 481813, "KS", ("Kansas", "State of Kansas")),
    StateInfo(21, 1779786, "KY", ("Kentucky", "State of Kentucky")),
    StateInfo(22, 1629543, "LA", ("Louisiana", "State of Louisiana")),
    StateInfo(23, 1779787, "ME", ("Maine", "State of Maine")),
    StateInfo(24, 1714934, "MD", ("Maryland", "State of Maryland")),
    StateInfo(25, 606926, "MA", ("Massachusetts", "Mass.", "State of Massachusetts")),
    StateInfo(26, 1779789, "MI", ("Michigan", "Mich.", "State of Michigan")),
    StateInfo(27, 662849, "MN", ("Minnesota", "Minn.", "State of Minnesota")),
    StateInfo(28, 1779790, "MS", ("Mississippi", "State of Mississippi")),
    StateInfo(29, 1779791, "MO", ("Missouri", "State of Missouri")),
    StateInfo(30, 767982, "MT", ("Montana", "State of Montana")),
    StateInfo(31, 1779792, "NE", ("Nebraska", "Neb.", "State of Nebraska")),
    StateInfo(32, 1779793, "NV", ("Nevada", "Nev.", "State of Nevada")),
    StateInfo(33, 1779794, "NH", ("New Hampshire", "N.H.", "State of New Hampshire")),
    StateInfo(34, 1779795, "NJ", ("New Jersey", "N.J.", "State of New Jersey")),
    StateInfo(35, 897535, "NM", ("New Mexico", "N.M.", "State of New Mexico")),
    StateInfo(
        36,
        1779796,
        "NY",
        (
            "New York",
            "N.Y.",
            "NY State",
            "New York State",
            "N.Y. State",
            "State of New York",
        ),
    ),
    StateInfo(37, 1027616, "NC", ("North Carolina", "N.C.", "State of North Carolina")),
    StateInfo(38, 1779797, "ND", ("North Dakota", "N.D.", "State of North Dakota")),
    StateInfo(39, 1085497, "OH", ("Ohio", "State of Ohio")),
    StateInfo(40, 1102857, "OK", ("Oklahoma", "Okla.", "State of Oklahoma")),
    StateInfo(41, 1155107, "OR", ("Oregon", "State of Oregon")),
    StateInfo(42, 1779798, "PA", ("Pennsylvania", "Penn.", "State of Pennsylvania")),
    StateInfo(44, 1219835, "RI", ("Rhode Island", "R.I.", "State of Rhode Island")),
    StateInfo(45, 1779799, "SC", ("South Carolina", "S.C.", "State of South Carolina")),
    StateInfo(46, 1785534, "SD", ("South Dakota", "S.D.", "State of South Dakota")),
    StateInfo(47, 1325873, "TN", ("Tennessee", "Tenn.", "State of Tennessee")),
    StateInfo(48, 1779801, "TX", ("Texas", "Tex.", "State of Texas")),
    StateInfo(49, 1455989, "UT", ("Utah", "State of Utah")),
    StateInfo(50, 1779802, "VT", ("Vermont", "State of Vermont")),
    StateInfo(51, 1779803, "VA", ("Virginia", "State of Virginia")),
    StateInfo(
        53,
        1779804,
        "WA",
        ("Washington", "Washington State", "State of Washington"),
    ),
    StateInfo(54, 1779805, "WV", ("West Virginia", "W.V.", "State of West Virginia")),
    StateInfo(55, 1779806, "WI", ("Wisconsin", "Wisc.", "State of Wisconsin")),
    StateInfo(56, 1779807, "WY", ("Wyoming", "State of Wyoming")),
)

US_STATES: Mapping[int, StateInfo] = MappingProxyType({s.state_id: s for s in _STATES})

# lower-cased plain state names, the first variant of each entry
US_STATE_NAMES = frozenset(s.variants[0].lower() for s in _STATES)
