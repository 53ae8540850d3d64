"""Domain models for slots, songs and preset sessions."""

from dataclasses import dataclass

DEFAULT_SLOTS: tuple[str, ...] = (
    "Opener",
    "Song 2",
    "Song 3",
    "Song 4",
    "Song 5",
    "Encore",
    "Cover",
    "Bustout",
)

DEFAULT_SONGS: tuple[str, ...] = (
    "Stay", "Funk E Zekial", "Landing", "French Cafe", "Overtired", "Totally",
    "On the Rise", "Couldn't We All", "F.U.", "Melting Lights", "Julia",
    "Schwanthem", "Zydeko", "Time To Ride", "Sunny Day", "Moonwalk", "Horizon",
    "Lightning", "White Night", "Live Life", "Upfunk", "Live It Up",
    "Walk Outside", "Burning Up My Time", "Condenser", "Fade Fast", "Pop Off",
    "Bad For You", "Whoopie", "Kiwi", "Interzood", "Penguins", "Fun in Funk",
    "Somethin' for Ya", "Ocean Flows", "The Liquid", "Porcupine", "Henrietta",
    "Too Long", "Doc", "Fox and Toad", "Offshoot", "Posideon", "King Kong",
    "Dawn a New Day", "High as Five", "Sail On", "Avalanche", "Fortress",
    "Yo Soy Fiesta", "Overrun", "Havana", "Snake Eyes", "Skipjack", "Elephante",
    "Move Like That", "Lost in Line", "Sir Real", "Water", "Lowdown", "Su Casa",
    "Distant Times", "Paperboy", "Whirled", "Beanstalk", "Indiglo", "The Town",
    "Alright Tonight", "Day In Time", "My Own Way", "Fall In Place", "Skinner",
    "Beneath The Surface", "Let The Boogie Out", "Overtime", "Sorcerer",
    "Feelin' Fine", "Yesterday In Time", "Calm Before the Storm", "Underworld",
    "Right Track", "Hell Yeah", "In the Bubble", "Feed The Fire",
    "Hit the Ground Runnin'", "Fantasy", "Twitch", "Mine", "Donkey Hotel",
    "Undivided", "Bloodshot Rose", "Blue Light", "Cliffs", "Dome People",
    "Drunk People", "Dutchmaster", "E Funk", "Feet on the Ground", "Funkijam",
    "Go With it", "J-Town", "Miyagi", "Montreal", "Philosophy", "Puddles",
    "Say Cheese", "Show Me", "Spaced", "Spacejam", "Steal the Shade", "The Hop",
    "The Labrynth", "The Switch", "The Turn", "This is that", "Treat Yourself",
    "Weightless", "Where Are We Going?", "Winters Splinters", "Wireless",
    "New Song",
)


@dataclass(frozen=True)
class SlotCatalog:
    """Immutable, ordered set of slot names a board may contain."""

    slots: tuple[str, ...] = DEFAULT_SLOTS

    def is_valid_slot(self, name: object) -> bool:
        """Return True when the name is one of the configured slots."""
        return isinstance(name, str) and name in self.slots

    def position(self, name: str) -> int:
        """Return the display position of a slot, unknown slots sort last."""
        try:
            return self.slots.index(name)
        except ValueError:
            return len(self.slots)

    @classmethod
    def from_names(cls, raw: str | None) -> "SlotCatalog":
        """Build a catalog from a comma-separated list, falling back to defaults."""
        if raw is None:
            return cls()
        names: list[str] = []
        for chunk in raw.split(","):
            value = chunk.strip()
            if value and value not in names:
                names.append(value)
        return cls(tuple(names)) if names else cls()


@dataclass(frozen=True)
class SessionListing:
    """A preset session advertised on the index page."""

    id: str
    title: str
