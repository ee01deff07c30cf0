"""Minimal English stop words dropped before lexical vectorization."""

STOP_WORDS: frozenset[str] = frozenset({
    # Single letters (from contractions, standalone, enumeration)
    "a", "b", "c", "d", "e", "f", "g", "h", "i", "j", "k", "l", "m",
    "n", "o", "p", "q", "r", "s", "t", "u", "v", "w", "x", "y", "z",
    # Determiners and articles
    "the", "an",
    # Conjunctions and prepositions
    "and", "or", "but", "if", "in", "on", "at", "to", "for", "of",
    "with", "by", "as", "into", "from", "about", "between", "through",
    "during", "before", "after", "above", "below", "under", "over",
    "until", "against", "via", "vs",
    # Pronouns
    "he", "she", "it", "we", "they", "me", "him", "her", "us", "them",
    "my", "his", "its", "our", "your", "their",
    "this", "that", "these", "those",
    "what", "which", "who", "whom", "whose",
    # Be/have/do forms
    "am", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did",
    # Modals
    "will", "would", "shall", "should", "may", "might", "must",
    "can", "could",
    # Adverbs and other function words
    "not", "no", "nor", "so", "too", "very", "just",
    "how", "when", "where", "why", "than", "then",
    "all", "each", "every", "both", "more", "most",
    "other", "some", "such", "any",
    # Contraction fragments (after word splitting on apostrophes)
    "don", "doesn", "didn", "won", "isn", "aren", "wasn", "ll", "ve", "re",
    # Page-title boilerplate
    "com", "www", "http", "https", "html",
})
