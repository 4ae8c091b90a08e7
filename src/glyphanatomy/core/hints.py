"""Features a letter is likely to show.

These are suggestions for which detectors to run on a character, not the
expected outcome: detection decides whether a feature is actually present.
Accented letters carry the features of their base letter that survive the
accent (a tittle replaced by an accent is dropped, for example).
"""

from glyphanatomy.domain import FEATURE_ALIASES, FeatureName


def _features(*names: str) -> tuple[FeatureName, ...]:
    return tuple(FEATURE_ALIASES.get(name) or FeatureName(name) for name in names)


_LOWERCASE: dict[str, tuple[FeatureName, ...]] = {
    "a": _features("bowl", "counter", "aperture", "arc", "finial", "loop", "terminal"),
    "b": _features("bowl", "counter", "loop", "stem", "foot"),
    "c": _features("aperture", "finial", "terminal"),
    "d": _features("bowl", "counter", "loop", "stem", "foot"),
    "e": _features("bowl", "counter", "eye", "aperture", "crossbar", "finial"),
    "f": _features("crossstroke", "hook", "tail", "stem"),
    "g": _features("bowl", "counter", "ear", "tail", "loop", "link"),
    "h": _features("stem", "shoulder", "foot"),
    "i": _features("tittle", "stem", "foot"),
    "j": _features("tittle", "tail", "hook", "stem"),
    "k": _features("stem", "leg"),
    "l": _features("stem", "foot"),
    "m": _features("stem", "shoulder", "foot"),
    "n": _features("stem", "shoulder", "foot"),
    "o": _features("bowl", "counter"),
    "p": _features("bowl", "counter", "tail", "loop", "stem"),
    "q": _features("bowl", "counter", "tail", "loop"),
    "r": _features("ear", "finial", "terminal"),
    "s": _features("spine", "finial"),
    "t": _features("crossstroke", "stem"),
    "u": _features("stem", "arc", "foot"),
    "v": _features("vertex", "crotch"),
    "w": _features("vertex", "crotch"),
    "x": (),
    "y": _features("tail", "vertex", "crotch"),
    "z": _features("finial"),
}

_UPPERCASE: dict[str, tuple[FeatureName, ...]] = {
    "A": _features("apex", "aperture", "crotch", "crossbar", "stem", "foot"),
    "B": _features("bowl", "counter", "stem", "foot"),
    "C": _features("aperture", "finial", "terminal"),
    "D": _features("bowl", "counter", "stem", "foot"),
    "E": _features("arm", "aperture", "crossbar", "stem", "foot"),
    "F": _features("arm", "crossbar", "beak", "stem", "foot"),
    "G": _features("aperture", "finial", "spur", "stem"),
    "H": _features("crossbar", "stem", "foot"),
    "I": _features("stem", "foot"),
    "J": _features("tail", "hook", "stem"),
    "K": _features("stem", "leg", "neck"),
    "L": _features("arm", "stem", "foot"),
    "M": _features("apex", "stem", "foot"),
    "N": _features("apex", "stem", "foot"),
    "O": _features("bowl", "counter"),
    "P": _features("bowl", "counter", "stem", "foot"),
    "Q": _features("bowl", "counter", "tail"),
    "R": _features("bowl", "counter", "stem", "leg", "neck"),
    "S": _features("spine", "finial", "beak"),
    "T": _features("arm", "crossbar", "beak", "stem"),
    "U": _features("stem"),
    "V": _features("vertex", "crotch"),
    "W": _features("apex", "vertex", "crotch"),
    "X": (),
    "Y": _features("vertex", "crotch"),
    "Z": _features("finial"),
}

# Vowels with an accent, per base letter
_ACCENTED: dict[str, tuple[FeatureName, ...]] = {
    "a": _features("bowl", "counter", "finial", "loop"),
    "e": _features("bowl", "counter", "eye", "crossbar", "finial"),
    "i": _features("tittle", "stem"),
    "o": _features("bowl", "counter"),
    "u": _features("stem"),
    "A": _features("apex", "crotch", "crossbar", "stem"),
    "E": _features("arm", "crossbar", "stem"),
    "I": _features("stem"),
    "O": _features("bowl", "counter"),
    "U": _features("stem"),
}

_ACCENT_FORMS = {
    "a": "áàâäā",
    "e": "éèêëē",
    "i": "íìîïī",
    "o": "óòôöō",
    "u": "úùûüū",
    "A": "ÁÀÂÄĀ",
    "E": "ÉÈÊËĒ",
    "I": "ÍÌÎÏĪ",
    "O": "ÓÒÔÖŌ",
    "U": "ÚÙÛÜŪ",
}

LETTER_FEATURE_HINTS: dict[str, tuple[FeatureName, ...]] = {
    **_LOWERCASE,
    **_UPPERCASE,
    **{form: _ACCENTED[base] for base, forms in _ACCENT_FORMS.items() for form in forms},
}


def features_for_character(char: str) -> tuple[FeatureName, ...]:
    """Hinted features for a single character (empty when unknown)."""
    return LETTER_FEATURE_HINTS.get(char, ())
