# Text -> TF-IDF feature components

from .tokenizer import Tokenizer, load_stopwords
from .vocabulary import Vocabulary, VocabularyBuilder
from .tfidf import IdfTable, TfidfTransformer
from .pipeline import FeaturePipeline, FittedFeatures

__all__ = [
    "Tokenizer",
    "load_stopwords",
    "Vocabulary",
    "VocabularyBuilder",
    "IdfTable",
    "TfidfTransformer",
    "FeaturePipeline",
    "FittedFeatures",
]
