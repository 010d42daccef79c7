"""Search queries used by the song fetcher, grouped by target language."""

ENGLISH_QUERIES = [
    # Popular artists
    "Ed Sheeran", "Taylor Swift", "Justin Bieber", "Ariana Grande",
    "The Weeknd", "Drake", "Post Malone", "Billie Eilish",
    "Bruno Mars", "Maroon 5", "Coldplay", "Imagine Dragons",
    "OneRepublic", "Shawn Mendes", "Dua Lipa", "Harry Styles",
    "Adele", "Sam Smith", "Charlie Puth", "John Legend",
    # Classic rock
    "Beatles", "Queen", "Eagles", "Bon Jovi", "Metallica",
    "Linkin Park", "Green Day", "Nirvana", "Red Hot Chili Peppers",
    "AC/DC", "Guns N Roses", "Pink Floyd", "Led Zeppelin",
    # Modern pop
    "The Chainsmokers", "Twenty One Pilots", "Panic At The Disco",
    "Fall Out Boy", "Paramore", "Arctic Monkeys", "Khalid",
    "Halsey", "Camila Cabello", "BTS English", "BlackPink English",
    # Genres
    "English pop hits", "English rock songs", "English love songs",
    "English dance songs", "English party songs", "English rap",
    "EDM hits", "top English songs", "English chart toppers",
    "English radio hits", "English 2024", "English 2025",
    # More artists
    "Katy Perry", "Lady Gaga", "Rihanna", "Beyonce", "Eminem",
    "Kanye West", "Jay Z", "Nicki Minaj", "Cardi B", "Travis Scott",
    "Selena Gomez", "Demi Lovato", "Miley Cyrus", "Jonas Brothers",
    "One Direction", "Zayn", "Niall Horan", "Louis Tomlinson",
]

MARATHI_QUERIES = [
    # Legends
    "Lata Mangeshkar Marathi", "Asha Bhosle Marathi", "Suresh Wadkar Marathi",
    "Anuradha Paudwal Marathi", "Usha Mangeshkar Marathi", "Hridaynath Mangeshkar",
    # Contemporary singers
    "Ajay Atul", "Shankar Mahadevan Marathi", "Amitraj Marathi",
    "Ajay Gogavale", "Atul Gogavale", "Adarsh Shinde", "Vaishali Samant",
    "Bela Shende", "Swapnil Bandodkar", "Shreya Ghoshal Marathi",
    "Sonu Nigam Marathi", "Rohan Pradhan", "Jasraj Joshi",
    "Anand Shinde", "Avadhoot Gandhi", "Kavita Ram", "Rahul Deshpande",
    "Hrishikesh Ranade", "Saurabh Bhalerao", "Shalmali Kholgade Marathi",
    "Hariharan Marathi", "Mahesh Kale", "Priyanka Barve", "Sayali Pankaj",
    "Avdhoot Gupte", "Rohit Raut", "Anandi Joshi", "Urmila Dhangar",
    "Pravin Kunwar", "Aanandi Joshi", "Sonali Sonawane", "Keval Walanj",
    "Mugdha Vaishampayan", "Shriram Iyer",
    # Films
    "Sairat", "Natsamrat", "Shala", "Duniyadari", "Timepass",
    "Lai Bhaari", "Zenda", "Mulshi Pattern", "Jhund", "Fandry",
    "Court", "Killa", "Yellow", "Balak Palak", "Jogwa",
    "Harishchandrachi Factory", "Shwaas", "Natarang", "Deool",
    "Katyar Kaljat Ghusali", "Sangharsh", "Pak Pak Pakaak",
    "Zapatlela", "Ashi Hi Banwa Banwi", "Mitwaa", "Dagdi Chawl",
    "Sairat songs", "Zingaat", "Aarti Marathi", "Powada Marathi",
    "Marathi DJ songs", "Marathi remix", "Marathi dance",
    # Moods and genres
    "Marathi love songs", "Marathi romantic songs", "Marathi sad songs",
    "Marathi item songs", "Marathi folk songs", "Marathi devotional",
    "Marathi lavani", "Marathi bhakti geet", "Marathi wedding songs",
    "Marathi party songs", "Marathi Ganpati songs", "Marathi dholki songs",
    "Marathi bhajan", "Marathi kawwali", "Marathi abhang", "Marathi aarti",
    "Marathi rap", "Marathi hip hop", "Marathi rock", "Marathi indie",
    # Festivals and devotion
    "Marathi Diwali songs", "Marathi Holi songs", "Marathi Navratri songs",
    "Marathi Gudi Padwa songs", "Marathi Shiv Jayanti songs",
    "Marathi Vitthal songs", "Marathi Mahadev songs", "Marathi Devi songs",
    "Marathi Krishna songs", "Marathi Ram songs", "Marathi Hanuman songs",
    # Recent
    "latest Marathi songs", "new Marathi songs 2024", "Marathi songs 2025",
    "Marathi trending songs", "Marathi chartbusters", "popular Marathi songs",
    # More films
    "Singham Marathi", "Bol Bachchan Marathi", "Daagdi Chaawl",
    "Faster Fene", "Ti Saddhya Kay Karte", "Classmates Marathi",
    "Checkmate Marathi", "Vazandar", "Poshter Girl", "Poshter Boyz",
    "Highway Marathi", "Lokmanya", "Priyatama", "Sanngto Aika",
    "Mumbai Pune Mumbai", "Aga Bai Arechya", "De Dhakka", "Balgandharva",
    "Fatteshikast", "Maharashtra Shaheer", "Marathi film songs",
    "Marathi classical", "Marathi natyageet", "Marathi tamasha",
    # Occasions and styles
    "Shivaji Maharaj songs", "Marathi patriotic", "Marathi motivational",
    "Marathi qawwali", "Marathi dance numbers", "Marathi fast songs",
    "Marathi slow songs", "Marathi club mix", "Marathi EDM",
    "Marathi unplugged", "Marathi cover songs", "Marathi mashup",
    "Aai Marathi songs", "Marathi mother songs", "Marathi birthday songs",
    "Marathi anniversary songs", "Marathi status songs", "Marathi ringtones",
    "Marathi garba", "Marathi dandiya", "Marathi navri songs",
    "Marathi groom songs", "Marathi baby songs", "Marathi lullaby",
    "Marathi tik tok songs", "Marathi instagram songs", "Marathi viral songs",
    "Marathi chartbuster 2026", "Marathi superhit songs", "Marathi blockbuster",
]

# A query containing one of these is treated as Marathi-targeted
MARATHI_QUERY_TERMS = (
    "marathi", "sairat", "natsamrat", "ajay atul",
    "lavani", "bhakti", "shree", "swami", "ganpati",
)

# Any of these in title, artist or album marks the song as English
KNOWN_ENGLISH_ARTISTS = (
    "ed sheeran", "taylor swift", "justin bieber",
    "ariana grande", "weeknd", "drake", "coldplay",
    "imagine dragons", "beatles", "queen", "metallica",
    "bruno mars", "maroon 5", "billie eilish", "post malone",
    "adele", "sam smith", "charlie puth", "eminem", "beyonce",
)
