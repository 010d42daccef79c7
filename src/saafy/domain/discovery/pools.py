"""
Curated search-term pools for discovery buckets.

Language pools feed "For You" and the per-language rows; theme pools feed
the themed rows. Each bucket draws its search terms from its pool in a
session-seeded order.
"""

from typing import NamedTuple


class Pool(NamedTuple):
    """Search terms behind one bucket."""

    key: str
    title: str
    queries: tuple[str, ...]


LANGUAGE_POOLS: dict[str, Pool] = {
    "hindi": Pool(
        key="hindi",
        title="Hindi",
        queries=(
            "Arijit Singh hits", "Pritam songs", "A.R. Rahman classics",
            "Shreya Ghoshal best", "Neha Kakkar popular", "Jubin Nautiyal",
            "Atif Aslam romantic", "Sonu Nigam hits", "Kumar Sanu classics",
            "Lata Mangeshkar", "Kishore Kumar", "Mohammed Rafi",
            "Honey Singh party", "Badshah hits", "Diljit Dosanjh hindi",
            "Shankar Mahadevan", "Sunidhi Chauhan", "Udit Narayan",
            "Bollywood romantic", "Bollywood party songs", "Bollywood 90s",
            "Bollywood 2000s hits", "Hindi unplugged", "Hindi lofi",
            "Bollywood dance", "Hindi sad songs", "Hindi motivational",
        ),
    ),
    "english": Pool(
        key="english",
        title="English",
        queries=(
            "Ed Sheeran hits", "Taylor Swift popular", "The Weeknd",
            "Dua Lipa songs", "Post Malone", "Drake hits",
            "Billie Eilish", "Justin Bieber", "Ariana Grande",
            "Bruno Mars", "Maroon 5", "Coldplay",
            "Imagine Dragons", "OneRepublic", "Chainsmokers",
            "Charlie Puth", "Shawn Mendes", "Khalid songs",
            "Pop hits 2024", "English romantic", "EDM party",
            "Hip hop hits", "R&B smooth", "Rock classics",
            "Indie pop", "English acoustic", "Trending English",
        ),
    ),
    "punjabi": Pool(
        key="punjabi",
        title="Punjabi",
        queries=(
            "Diljit Dosanjh hits", "Sidhu Moosewala", "AP Dhillon",
            "Karan Aujla songs", "Guru Randhawa", "Hardy Sandhu",
            "Jassie Gill", "Ammy Virk songs", "Jasmine Sandlas",
            "B Praak songs", "Amrinder Gill", "Gurdas Maan",
            "Punjabi party songs", "Punjabi romantic", "Punjabi bhangra",
            "Punjabi sad songs", "New punjabi songs", "Punjabi dj",
            "Punjabi hip hop", "Punjabi wedding songs", "Trending punjabi",
        ),
    ),
    "marathi": Pool(
        key="marathi",
        title="Marathi",
        queries=(
            "Marathi romantic songs", "Marathi movie songs", "Ajay Atul songs",
            "Shankar Mahadevan marathi", "Avadhoot Gupte", "Swapnil Bandodkar",
            "Bela Shende songs", "Marathi lavani", "Marathi natya sangeet",
            "Marathi unplugged", "Marathi party songs", "Marathi devotional",
            "Sairat songs", "Marathi 90s", "New marathi songs",
            "Marathi dj songs", "Marathi sad songs", "Marathi love songs",
        ),
    ),
}

THEME_POOLS: dict[str, Pool] = {
    "party": Pool(
        key="party",
        title="Party Starters",
        queries=(
            "Bollywood party songs", "Punjabi party songs", "EDM party",
            "Honey Singh party", "Badshah hits", "Dance hits",
            "Club bangers", "Marathi dj songs", "Punjabi dj",
            "Bollywood dance",
        ),
    ),
    "chill": Pool(
        key="chill",
        title="Chill Vibes",
        queries=(
            "Hindi lofi", "Hindi unplugged", "English acoustic",
            "Chill lofi beats", "Indie pop", "Marathi unplugged",
            "Prateek Kuhad", "Acoustic covers", "Late night chill",
            "Soft romantic hindi",
        ),
    ),
    "romantic": Pool(
        key="romantic",
        title="Romantic Hits",
        queries=(
            "Bollywood romantic", "Arijit Singh hits", "Atif Aslam romantic",
            "English romantic", "Punjabi romantic", "Marathi love songs",
            "Shreya Ghoshal best", "Love songs 90s", "Romantic duets",
            "Jubin Nautiyal",
        ),
    ),
    "trending": Pool(
        key="trending",
        title="Trending Now",
        queries=(
            "Trending English", "Trending punjabi", "New punjabi songs",
            "New marathi songs", "Pop hits 2024", "Latest bollywood",
            "Viral hits", "Top 50 India", "New hindi songs",
            "Chart toppers",
        ),
    ),
    "workout": Pool(
        key="workout",
        title="Workout Energy",
        queries=(
            "Workout motivation", "Gym songs", "Hindi motivational",
            "Hip hop hits", "Punjabi bhangra", "Rock classics",
            "Running songs", "High energy EDM", "Power anthems",
            "Imagine Dragons",
        ),
    ),
}


def get_pool(key: str) -> Pool | None:
    """Look up a language or theme pool by key."""
    return LANGUAGE_POOLS.get(key) or THEME_POOLS.get(key)


def display_name(key: str) -> str:
    pool = get_pool(key)
    return pool.title if pool else key
