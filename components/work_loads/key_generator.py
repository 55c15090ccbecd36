import random
from typing import Dict, Optional, List, Tuple
from dataclasses import dataclass
from faker import Faker

KINDS = ("words", "prefixed", "ipv4", "paths")

## === Config Class === ##

@dataclass
class KeyConfig:
  """
  Configuration for KeyGenerator
      kind: str, one of KINDS
      prefix_freq: float, chance that a "prefixed" key reuses a recent key's prefix
      public_share: float, proportion of public IPs for "ipv4"
      private_weights: dict, weights for private IPs {a: x, b: x, c: x}
      seed: int, seed for random number generator
  """
  kind: str = "words"
  prefix_freq: float = 0.5
  public_share: float = 0.9
  private_weights: Optional[Dict[str, float]] = None
  seed: Optional[int] = None

  def __post_init__(self):
    if self.kind not in KINDS:
      raise ValueError(f"kind must be one of {KINDS}, got {self.kind!r}")
    if self.prefix_freq < 0 or self.prefix_freq >= 1:
      raise ValueError("prefix_freq must be between 0 and 1")
    if self.public_share < 0 or self.public_share > 1:
      raise ValueError("public_share must be between 0 and 1")
    if self.private_weights is None:
      self.private_weights = {'a': 0.35, 'b': 0.10, 'c': 0.55}
    else:
      missing = [k for k in ('a','b','c') if k not in self.private_weights]
      if missing:
        raise ValueError(f"private_weights missing keys: {missing}")
      if any(self.private_weights[k] < 0 for k in ('a','b','c')):
        raise ValueError("private_weights must be non-negative")
      if sum(self.private_weights[k] for k in ('a','b','c')) == 0:
        raise ValueError("Sum of private_weights must be > 0")
      srtd = {cls: self.private_weights[cls] for cls in sorted(self.private_weights.keys())}
      self.private_weights = srtd


class KeyGenerator:
  """Reproducible stream of string keys for building tries.

  - "words": single lorem words (many short shared prefixes)
  - "prefixed": words that, with probability `prefix_freq`, extend a prefix of
    one of the last few keys, forcing splits deep in the trie
  - "ipv4": dotted IPv4 addresses, mostly public
  - "paths": URI paths such as "app/posts/category"
  """
  recent_window = 16

  def __init__(self, config: KeyConfig):
    self.config = config
    self.rng = random.Random(self.config.seed)

    self.fake = Faker()
    if self.config.seed is not None:
      self.fake.seed_instance(self.config.seed)
    self.priv_classes, self.weights = zip(*self.config.private_weights.items())
    self.recent: List[str] = []

  def _priv_class(self):
    return self.rng.choices(self.priv_classes, weights=self.weights, k=1)[0]

  def _ipv4(self):
    if self.rng.random() > self.config.public_share:
      cls = self._priv_class()
      return self.fake.ipv4_private(address_class=cls)
    return self.fake.ipv4_public()

  def _prefixed(self):
    word = self.fake.word()
    if self.recent and self.rng.random() < self.config.prefix_freq:
      base = self.rng.choice(self.recent)
      cut = self.rng.randint(1, len(base))
      word = base[:cut] + word
    self.recent.append(word)
    if len(self.recent) > self.recent_window:
      self.recent.pop(0)
    return word

  def single(self) -> str:
    kind = self.config.kind
    if kind == "words":
      return self.fake.word()
    if kind == "prefixed":
      return self._prefixed()
    if kind == "ipv4":
      return self._ipv4()
    return self.fake.uri_path()

  def batch(self, n) -> List[str]:
    if n <= 0:
      raise ValueError("n must be positive")
    return [self.single() for _ in range(n)]

  def pairs(self, n) -> List[Tuple[str, int]]:
    """Return n `(key, index)` pairs; repeated keys keep their own index."""
    return [(key, i) for i, key in enumerate(self.batch(n))]


def generate_keys(num_keys, kind="words", seed=None, prefix_freq=0.5):
  """Shorthand for `KeyGenerator(KeyConfig(...)).batch(num_keys)`."""
  config = KeyConfig(kind=kind, prefix_freq=prefix_freq, seed=seed)
  return KeyGenerator(config).batch(num_keys)
