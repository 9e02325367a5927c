from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


BASIC_CORPUS = (
    "el gat està content. el gos és feliç. el gat dorm. el gos juga. "
    "el gat menja. el gos corre. el cotxe és ràpid. el cotxe va lluny."
)

EXTENDED_CORPUS = (
    "la pluja cau lenta. el sol surt a poc a poc. la nena llegeix un llibre. "
    "el noi escriu una carta. la ciutat dorm però el tren passa. el carrer és buit i tranquil. "
    "el vent porta olor de mar. el matí arriba amb calma. la pluja es fa fina i el vent baixa. "
    "el sol torna i la ciutat es desperta. la nena guarda el llibre i somriu. "
    "el noi llegeix la carta i respira. el tren arriba tard però passa de pressa. "
    "el carrer queda buit i el silenci dura. el mar és calmat i l'olor és dolça. "
    "la calma del matí es queda una estona."
)


@dataclass(frozen=True)
class CorpusOption:
    id: str
    label: str
    text: str


CORPUS_OPTIONS = [
    CorpusOption(id="basic", label="Corpus bàsic", text=BASIC_CORPUS),
    CorpusOption(id="extended", label="Corpus ampliat", text=EXTENDED_CORPUS),
    CorpusOption(id="custom", label="Personalitzat", text=""),
]


def get_corpus(corpus_id: str, options: list[CorpusOption] | None = None) -> CorpusOption:
    for option in options if options is not None else CORPUS_OPTIONS:
        if option.id == corpus_id:
            return option
    raise KeyError(f"Unknown corpus: {corpus_id}")


def load_corpus_csv(path: str | Path) -> list[CorpusOption]:
    df = pd.read_csv(path)
    if not {"id", "label", "text"}.issubset(df.columns):
        raise ValueError("CSV must have columns: id,label,text")
    df = df.fillna("")
    options = [
        CorpusOption(id=str(row.id), label=str(row.label), text=str(row.text))
        for row in df.itertuples(index=False)
    ]
    logger.info(f"Loaded {len(options)} corpora from {path}")
    return options


def load_corpus_text(path: str | Path) -> str:
    return Path(path).read_text(encoding="utf-8")
