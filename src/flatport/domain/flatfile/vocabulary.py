"""Controlled vocabularies for language and script columns.

Values are stored in their canonical casing: ISO 639-1 language codes in
lower case and ISO 15924 script codes in title case.
"""

from __future__ import annotations

from typing import Final

LANGUAGE_CODES: Final[tuple[str, ...]] = (
    "aa", "ab", "ae", "af", "ak", "am", "an", "ar", "as", "av", "ay", "az",
    "ba", "be", "bg", "bi", "bm", "bn", "bo", "br", "bs",
    "ca", "ce", "ch", "co", "cr", "cs", "cu", "cv", "cy",
    "da", "de", "dv", "dz",
    "ee", "el", "en", "eo", "es", "et", "eu",
    "fa", "ff", "fi", "fj", "fo", "fr", "fy",
    "ga", "gd", "gl", "gn", "gu", "gv",
    "ha", "he", "hi", "ho", "hr", "ht", "hu", "hy", "hz",
    "ia", "id", "ie", "ig", "ii", "ik", "io", "is", "it", "iu",
    "ja", "jv",
    "ka", "kg", "ki", "kj", "kk", "kl", "km", "kn", "ko", "kr", "ks", "ku", "kv", "kw", "ky",
    "la", "lb", "lg", "li", "ln", "lo", "lt", "lu", "lv",
    "mg", "mh", "mi", "mk", "ml", "mn", "mr", "ms", "mt", "my",
    "na", "nb", "nd", "ne", "ng", "nl", "nn", "no", "nr", "nv", "ny",
    "oc", "oj", "om", "or", "os",
    "pa", "pi", "pl", "ps", "pt",
    "qu",
    "rm", "rn", "ro", "ru", "rw",
    "sa", "sc", "sd", "se", "sg", "si", "sk", "sl", "sm", "sn", "so", "sq", "sr", "ss", "st",
    "su", "sv", "sw",
    "ta", "te", "tg", "th", "ti", "tk", "tl", "tn", "to", "tr", "ts", "tt", "tw", "ty",
    "ug", "uk", "ur", "uz",
    "ve", "vi", "vo",
    "wa", "wo",
    "xh",
    "yi", "yo",
    "za", "zh", "zu",
)  # fmt: skip

SCRIPT_CODES: Final[tuple[str, ...]] = (
    "Adlm", "Aghb", "Ahom", "Arab", "Aran", "Armi", "Armn", "Avst",
    "Bali", "Bamu", "Bass", "Batk", "Beng", "Bhks", "Bopo", "Brah", "Brai", "Bugi", "Buhd",
    "Cakm", "Cans", "Cari", "Cham", "Cher", "Chrs", "Copt", "Cpmn", "Cprt", "Cyrl", "Cyrs",
    "Deva", "Diak", "Dogr", "Dsrt", "Dupl",
    "Egyd", "Egyh", "Egyp", "Elba", "Elym", "Ethi",
    "Geok", "Geor", "Glag", "Gong", "Gonm", "Goth", "Gran", "Grek", "Gujr", "Guru",
    "Hanb", "Hang", "Hani", "Hano", "Hans", "Hant", "Hatr", "Hebr", "Hira", "Hluw", "Hmng",
    "Hmnp", "Hrkt", "Hung",
    "Ital",
    "Jamo", "Java", "Jpan",
    "Kali", "Kana", "Kawi", "Khar", "Khmr", "Khoj", "Kits", "Knda", "Kore", "Kthi",
    "Lana", "Laoo", "Latf", "Latg", "Latn", "Lepc", "Limb", "Lina", "Linb", "Lisu", "Lyci",
    "Lydi",
    "Mahj", "Maka", "Mand", "Mani", "Marc", "Medf", "Mend", "Merc", "Mero", "Mlym", "Modi",
    "Mong", "Mroo", "Mtei", "Mult", "Mymr",
    "Nagm", "Nand", "Narb", "Nbat", "Newa", "Nkoo", "Nshu",
    "Ogam", "Olck", "Orkh", "Orya", "Osge", "Osma", "Ougr",
    "Palm", "Pauc", "Perm", "Phag", "Phli", "Phlp", "Phnx", "Plrd", "Prti",
    "Rjng", "Rohg", "Runr",
    "Samr", "Sarb", "Saur", "Sgnw", "Shaw", "Shrd", "Sidd", "Sind", "Sinh", "Sogd", "Sogo",
    "Sora", "Soyo", "Sund", "Sylo", "Syrc", "Syre", "Syrj", "Syrn",
    "Tagb", "Takr", "Tale", "Talu", "Taml", "Tang", "Tavt", "Telu", "Tfng", "Tglg", "Thaa",
    "Thai", "Tibt", "Tirh", "Tnsa", "Toto",
    "Ugar",
    "Vaii", "Vith",
    "Wara", "Wcho",
    "Xpeo", "Xsux",
    "Yezi", "Yiii",
    "Zanb", "Zinh", "Zmth", "Zsye", "Zsym", "Zxxx", "Zyyy", "Zzzz",
)  # fmt: skip


def canonical_lookup(vocabulary: tuple[str, ...]) -> dict[str, str]:
    """Map lower-cased values to their canonical spelling."""

    return {value.lower(): value for value in vocabulary}
