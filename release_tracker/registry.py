"""Tracked Hugging Face organizations and the static company metadata behind them.

Several orgs can map to the same company (e.g. ``meta-llama`` and
``facebook``); their models are aggregated into one company entry.
"""

from dataclasses import dataclass

from release_tracker.models import ResearchCenter


@dataclass(frozen=True)
class CompanyInfo:
    """Static metadata for the company behind one or more Hub orgs."""

    id: str
    name: str
    hq: str
    lat: float
    lng: float
    founded: int


DEFAULT_COLOR = "#00d9ff"

_META = CompanyInfo("meta", "Meta", "Menlo Park, CA", 37.4848, -122.1484, 2004)
_GOOGLE = CompanyInfo("google", "Google", "Mountain View, CA", 37.4220, -122.0841, 1998)
_MICROSOFT = CompanyInfo("microsoft", "Microsoft", "Redmond, WA", 47.6740, -122.1215, 1975)
_MISTRAL = CompanyInfo("mistral", "Mistral AI", "Paris, France", 48.8566, 2.3522, 2023)
_ALIBABA = CompanyInfo("alibaba", "Alibaba Qwen", "Hangzhou, China", 30.2741, 120.1551, 1999)
_DEEPSEEK = CompanyInfo("deepseek", "DeepSeek", "Hangzhou, China", 30.2084, 120.2106, 2023)
_OPENAI = CompanyInfo("openai", "OpenAI", "San Francisco, CA", 37.7621, -122.4153, 2015)
_NVIDIA = CompanyInfo("nvidia", "NVIDIA", "Santa Clara, CA", 37.3708, -121.9643, 1993)
_STABILITY = CompanyInfo("stability", "Stability AI", "London, UK", 51.5074, -0.1278, 2019)
_BFL = CompanyInfo("bfl", "Black Forest Labs", "Freiburg, Germany", 47.9990, 7.8421, 2024)
_COHERE = CompanyInfo("cohere", "Cohere", "Toronto, Canada", 43.6532, -79.3832, 2019)
_AI2 = CompanyInfo("ai2", "Allen Institute for AI", "Seattle, WA", 47.6477, -122.3375, 2014)
_TII = CompanyInfo("tii", "TII", "Abu Dhabi, UAE", 24.4539, 54.3773, 2020)
_ZHIPU = CompanyInfo("zhipu", "Zhipu AI", "Beijing, China", 39.9836, 116.3146, 2019)
_MOONSHOT = CompanyInfo("moonshot", "Moonshot AI", "Beijing, China", 39.9928, 116.3381, 2023)
_MINIMAX = CompanyInfo("minimax", "MiniMax", "Shanghai, China", 31.2304, 121.4737, 2021)
_IBM = CompanyInfo("ibm", "IBM", "Armonk, NY", 41.1086, -73.7204, 1911)
_APPLE = CompanyInfo("apple", "Apple", "Cupertino, CA", 37.3349, -122.0090, 1976)
_HUGGINGFACE = CompanyInfo("huggingface", "Hugging Face", "New York, NY", 40.7128, -74.0060, 2016)
_BAAI = CompanyInfo("baai", "BAAI", "Beijing, China", 39.9590, 116.2986, 2018)

# Hub org id -> company. Order of TRACKED_ORGS is the fetch order.
ORG_TO_COMPANY: dict[str, CompanyInfo] = {
    "meta-llama": _META,
    "facebook": _META,
    "google": _GOOGLE,
    "microsoft": _MICROSOFT,
    "mistralai": _MISTRAL,
    "Qwen": _ALIBABA,
    "deepseek-ai": _DEEPSEEK,
    "openai": _OPENAI,
    "nvidia": _NVIDIA,
    "stabilityai": _STABILITY,
    "black-forest-labs": _BFL,
    "CohereForAI": _COHERE,
    "allenai": _AI2,
    "tiiuae": _TII,
    "zai-org": _ZHIPU,
    "moonshotai": _MOONSHOT,
    "MiniMaxAI": _MINIMAX,
    "ibm-granite": _IBM,
    "apple": _APPLE,
    "HuggingFaceTB": _HUGGINGFACE,
    "BAAI": _BAAI,
}

TRACKED_ORGS: list[str] = list(ORG_TO_COMPANY)

COMPANY_COLORS: dict[str, str] = {
    "Meta": "#0668e1",
    "Google": "#4285f4",
    "Microsoft": "#00a4ef",
    "Mistral AI": "#ff7000",
    "Alibaba Qwen": "#615ced",
    "DeepSeek": "#4d6bfe",
    "OpenAI": "#10a37f",
    "NVIDIA": "#76b900",
    "Stability AI": "#a855f7",
    "Black Forest Labs": "#e11d48",
    "Cohere": "#39594d",
    "Allen Institute for AI": "#f0529c",
    "TII": "#c9a227",
    "Zhipu AI": "#3b82f6",
    "Moonshot AI": "#94a3b8",
    "MiniMax": "#f43f5e",
    "IBM": "#0f62fe",
    "Apple": "#a3aaae",
    "Hugging Face": "#ffd21e",
    "BAAI": "#14b8a6",
}

RESEARCH_CENTERS: list[ResearchCenter] = [
    ResearchCenter(name="MIT CSAIL", lat=42.3616, lng=-71.0906),
    ResearchCenter(name="Stanford HAI", lat=37.4275, lng=-122.1697),
    ResearchCenter(name="University of Oxford", lat=51.7548, lng=-1.2544),
    ResearchCenter(name="ETH Zurich", lat=47.3763, lng=8.5477),
    ResearchCenter(name="Mila", lat=45.5308, lng=-73.6128),
    ResearchCenter(name="Tsinghua University", lat=40.0000, lng=116.3264),
    ResearchCenter(name="University of Tokyo", lat=35.7126, lng=139.7620),
    ResearchCenter(name="KAIST", lat=36.3721, lng=127.3604),
    ResearchCenter(name="IISc Bangalore", lat=13.0219, lng=77.5671),
    ResearchCenter(name="Max Planck Institute for Intelligent Systems", lat=48.5366, lng=9.0594),
]


def company_color(name: str) -> str:
    """Return the brand color for a company name, or the default accent."""
    return COMPANY_COLORS.get(name, DEFAULT_COLOR)
