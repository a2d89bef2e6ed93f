"""The 78-card tarot deck and the draw operation."""

import random
from dataclasses import asdict, dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()


class Orientation(str, Enum):
    UPRIGHT = "Upright"
    INVERTED = "Inverted"

    @property
    def label(self) -> str:
        return "Derecha" if self is Orientation.UPRIGHT else "Invertida"


class Position(str, Enum):
    PAST = "Past"
    PRESENT = "Present"
    FUTURE = "Future"

    @property
    def label(self) -> str:
        return _POSITION_LABELS[self]


_POSITION_LABELS = {
    Position.PAST: "Pasado",
    Position.PRESENT: "Presente",
    Position.FUTURE: "Futuro",
}

# Draw order -> position; cards beyond the spread have none
SPREAD_POSITIONS = [Position.PAST, Position.PRESENT, Position.FUTURE]

_ORIENTATION_ALIASES = {
    "upright": Orientation.UPRIGHT,
    "derecha": Orientation.UPRIGHT,
    "derecho": Orientation.UPRIGHT,
    "inverted": Orientation.INVERTED,
    "reversed": Orientation.INVERTED,
    "invertida": Orientation.INVERTED,
    "invertido": Orientation.INVERTED,
}

_POSITION_ALIASES = {
    "past": Position.PAST,
    "pasado": Position.PAST,
    "present": Position.PRESENT,
    "presente": Position.PRESENT,
    "future": Position.FUTURE,
    "futuro": Position.FUTURE,
}


@dataclass(frozen=True)
class Card:
    id: int
    name: str
    major_arcana: bool
    image_ref: str


def _card_id(raw) -> int:
    """Deck index from a client payload; -1 when missing or not numeric."""
    if isinstance(raw, bool):
        return -1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return -1


@dataclass(frozen=True)
class DrawnCard:
    id: int
    name: str
    major_arcana: bool
    image_ref: str
    upright: bool
    orientation: Orientation
    position: Position | None

    @property
    def position_label(self) -> str | None:
        return self.position.label if self.position else None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["orientation"] = self.orientation.value
        data["position"] = self.position.value if self.position else None
        return data

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "DrawnCard":
        """Build from a client payload, accepting English or Spanish labels."""
        upright = data.get("upright")
        raw_orientation = str(data.get("orientation") or "").lower()
        orientation = _ORIENTATION_ALIASES.get(raw_orientation)
        if orientation is None:
            if raw_orientation:
                logger.warning(
                    "card.unknown_orientation", name=data.get("name"), label=raw_orientation
                )
            orientation = Orientation.INVERTED if upright is False else Orientation.UPRIGHT
        raw_position = str(data.get("position") or data.get("posicion") or "").lower()
        position = _POSITION_ALIASES.get(raw_position)
        if position is None and index < len(SPREAD_POSITIONS) and not raw_position:
            position = SPREAD_POSITIONS[index]
        return cls(
            id=_card_id(data.get("id")),
            name=str(data["name"]),
            major_arcana=bool(data.get("major_arcana", data.get("majorArcana", False))),
            image_ref=str(data.get("image_ref", data.get("imageRef", data.get("img", "")))),
            upright=orientation is Orientation.UPRIGHT,
            orientation=orientation,
            position=position,
        )


_MAJOR_ARCANA = [
    "El Loco",
    "El Mago",
    "La Sacerdotisa",
    "La Emperatriz",
    "El Emperador",
    "El Hierofante",
    "Los Enamorados",
    "El Carro",
    "La Fuerza",
    "El Ermitaño",
    "La Rueda de la Fortuna",
    "La Justicia",
    "El Colgado",
    "La Muerte",
    "La Templanza",
    "El Diablo",
    "La Torre",
    "La Estrella",
    "La Luna",
    "El Sol",
    "El Juicio",
    "El Mundo",
]

_SUITS = ["Bastos", "Copas", "Espadas", "Oros"]

_RANKS = [
    "As",
    "Dos",
    "Tres",
    "Cuatro",
    "Cinco",
    "Seis",
    "Siete",
    "Ocho",
    "Nueve",
    "Diez",
    "Sota",
    "Caballero",
    "Reina",
    "Rey",
]


def _build_deck() -> tuple[Card, ...]:
    cards = [
        Card(id=i, name=name, major_arcana=True, image_ref=f"major/{i:02d}.jpg")
        for i, name in enumerate(_MAJOR_ARCANA)
    ]
    next_id = len(cards)
    for suit in _SUITS:
        for rank_no, rank in enumerate(_RANKS, start=1):
            cards.append(
                Card(
                    id=next_id,
                    name=f"{rank} de {suit}",
                    major_arcana=False,
                    image_ref=f"minor/{suit.lower()}/{rank_no:02d}.jpg",
                )
            )
            next_id += 1
    return tuple(cards)


TAROT_DECK: tuple[Card, ...] = _build_deck()


class CardPool:
    """Draws cards without replacement, each with an independent orientation."""

    def __init__(self, deck: tuple[Card, ...] = TAROT_DECK, rng: random.Random | None = None):
        self.deck = deck
        self._rng = rng or random.Random()

    def draw(self, n: int = 3) -> list[DrawnCard]:
        """Draw up to n distinct cards; asking for more than the deck returns the whole deck."""
        count = max(0, min(n, len(self.deck)))
        picked = self._rng.sample(self.deck, count)
        drawn = []
        for i, card in enumerate(picked):
            upright = self._rng.random() < 0.5
            drawn.append(
                DrawnCard(
                    id=card.id,
                    name=card.name,
                    major_arcana=card.major_arcana,
                    image_ref=card.image_ref,
                    upright=upright,
                    orientation=Orientation.UPRIGHT if upright else Orientation.INVERTED,
                    position=SPREAD_POSITIONS[i] if i < len(SPREAD_POSITIONS) else None,
                )
            )
        return drawn
