import os
import random
from typing import Iterable, List, Optional, Sequence

from onomatoparty.exceptions import AssetLookupFailed

DEFAULT_CARD_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.gif')


def shuffle_deck(cards: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Return a uniformly shuffled copy of ``cards`` (Fisher-Yates)."""
    rng = rng or random
    deck = list(cards)
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck[i], deck[j] = deck[j], deck[i]
    return deck


class DeckAssets:
    """Read-only view of the card images on disk.

    Each deck is a sub-directory of ``root``; its cards are the image files
    inside it. Card ids are plain filenames.
    """

    def __init__(self, root: str, extensions: Iterable[str] = DEFAULT_CARD_EXTENSIONS):
        self.root = os.path.abspath(root)
        self.extensions = tuple(ext.lower() for ext in extensions)

    def _deck_path(self, deck_name: str) -> str:
        if not isinstance(deck_name, str) or not deck_name:
            raise AssetLookupFailed(deck_name, 'deck name is required')
        path = os.path.abspath(os.path.join(self.root, deck_name))
        if os.path.dirname(path) != self.root:
            raise AssetLookupFailed(deck_name, 'deck name escapes the asset root')
        return path

    def list_cards(self, deck_name: str) -> List[str]:
        path = self._deck_path(deck_name)
        try:
            entries = os.listdir(path)
        except OSError as exc:
            raise AssetLookupFailed(deck_name, exc.strerror) from exc
        return sorted(
            name for name in entries
            if name.lower().endswith(self.extensions)
            and os.path.isfile(os.path.join(path, name))
        )

    def list_decks(self) -> List[str]:
        try:
            entries = os.listdir(self.root)
        except OSError:
            return []
        return sorted(
            name for name in entries
            if os.path.isdir(os.path.join(self.root, name))
        )
