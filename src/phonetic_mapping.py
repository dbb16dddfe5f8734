# ============================================
# Programa: phonetic_mapping.py
# Versión: 2.0
# Descripción: Conversión de texto en inglés a una aproximación sonora
#              usando un diccionario de pronunciación IPA
# ============================================

import logging
from pathlib import Path

# Símbolo IPA -> aproximación en inglés
IPA_TO_ENGLISH = {
    # Consonantes
    "p": "p",
    "b": "b",
    "t": "t",
    "d": "d",
    "k": "k",
    "g": "g",
    "f": "f",
    "v": "v",
    "s": "s",
    "z": "z",
    "h": "h",
    "m": "m",
    "n": "n",
    "l": "l",
    "w": "w",
    "ʃ": "sh",
    "ʒ": "zh",
    "tʃ": "ch",
    "dʒ": "j",
    "ŋ": "ng",
    "j": "y",
    "θ": "th",
    "ð": "dh",
    "ɹ": "r",
    "ʔ": "'",
    "x": "kh",
    "ɲ": "ny",
    # Vocales
    "i": "ee",
    "ɪ": "ih",
    "e": "eh",
    "ɛ": "e",
    "æ": "a",
    "ɑ": "ah",
    "ɒ": "o",
    "ɔ": "aw",
    "o": "oh",
    "ʊ": "uh",
    "u": "oo",
    "ʌ": "u",
    "ə": "uh",
    "ɜ": "er",
    # Diptongos
    "eɪ": "ay",
    "aɪ": "ai",
    "aʊ": "ow",
    "ɔɪ": "oi",
    "oʊ": "oh",
    "ɪə": "eer",
    # Suprasegmentales
    "ˈ": "'",
    "ˌ": ",",
    "ː": ":",
}


def load_ipa_dictionary(path):
    """Carga un diccionario `palabra /ipa/` (una entrada por línea).

    Si el archivo no existe devuelve un diccionario vacío.
    """
    dictionary = {}
    try:
        with Path(path).open(encoding="utf-8") as f:
            for line in f:
                parts = line.split()
                if len(parts) < 2:
                    continue
                dictionary[parts[0].lower()] = " ".join(parts[1:])
    except FileNotFoundError:
        logging.warning(f"Diccionario IPA no encontrado: {path}")
        return dictionary

    logging.info(f"Diccionario IPA cargado: {len(dictionary)} entradas")
    return dictionary


def strip_ipa_delimiters(ipa):
    # "/a/, /b/" -> "a"
    if not ipa.startswith("/"):
        return ipa
    end = ipa.find("/", 1)
    if end == -1:
        return ipa[1:]
    return ipa[1:end]


def ipa_to_english_sound(ipa_word, mapping=IPA_TO_ENGLISH):
    """Convierte una palabra IPA en sonidos separados por guiones.

    Los símbolos de dos caracteres (tʃ, aɪ, ...) tienen prioridad. Los
    símbolos sin equivalencia se copian tal cual.
    """
    sounds = []
    i = 0
    while i < len(ipa_word):
        pair = ipa_word[i:i + 2]
        if len(pair) == 2 and pair in mapping:
            symbol = pair
        else:
            symbol = ipa_word[i]
        sounds.append(mapping.get(symbol, symbol))
        i += len(symbol)
    return "-".join(sounds)


def word_to_phonetic(word, dictionary):
    return dictionary.get(word.lower(), word)


def text_to_phonetic(text, dictionary):
    words = []
    for word in text.split():
        ipa = strip_ipa_delimiters(word_to_phonetic(word, dictionary))
        words.append(ipa_to_english_sound(ipa))
    return " ".join(words)
