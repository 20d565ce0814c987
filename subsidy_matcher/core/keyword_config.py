"""Zentrale Lookup-Tabellen für Profil-Analyse und Pre-Scoring.

Single source of truth for the static data used by
profile_analyzer.py and pre_scoring.py:
- NAF code prefix -> sector
- sector exclusion keywords (title hard filter)
- sector / region / universal indicator keywords
- legal form -> eligible entity types
- funding agency boost tiers

The tables are loaded once and exposed read-only through KeywordTables.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Tuple


# ============================================================
# NAF code (2-digit division) -> sector
# ============================================================
NAF_SECTOR_MAP: Dict[str, str] = {
    # Agriculture, sylviculture et pêche
    "01": "Agriculture",
    "02": "Sylviculture",
    "03": "Pêche",
    # Industries extractives
    "05": "Mines",
    "06": "Énergie",
    "07": "Mines",
    "08": "Carrières",
    "09": "Énergie",
    # Industrie manufacturière
    "10": "Agroalimentaire",
    "11": "Agroalimentaire",
    "12": "Industrie",
    "13": "Textile",
    "14": "Textile",
    "15": "Cuir",
    "16": "Bois",
    "17": "Papier",
    "18": "Imprimerie",
    "19": "Énergie",
    "20": "Chimie",
    "21": "Pharmacie",
    "22": "Plasturgie",
    "23": "Matériaux",
    "24": "Métallurgie",
    "25": "Métallurgie",
    "26": "Électronique",
    "27": "Électronique",
    "28": "Mécanique",
    "29": "Automobile",
    "30": "Aéronautique",
    "31": "Ameublement",
    "32": "Industrie",
    "33": "Industrie",
    # Énergie, eau, déchets
    "35": "Énergie",
    "36": "Environnement",
    "37": "Environnement",
    "38": "Environnement",
    "39": "Environnement",
    # Construction
    "41": "BTP",
    "42": "BTP",
    "43": "BTP",
    # Commerce
    "45": "Commerce",
    "46": "Commerce",
    "47": "Commerce",
    # Transport et entreposage
    "49": "Transport",
    "50": "Transport",
    "51": "Transport",
    "52": "Logistique",
    "53": "Logistique",
    # Hébergement et restauration
    "55": "Tourisme",
    "56": "Restauration",
    # Information et communication
    "58": "Édition",
    "59": "Audiovisuel",
    "60": "Audiovisuel",
    "61": "Télécommunications",
    "62": "Numérique",
    "63": "Numérique",
    # Finance, assurance, immobilier
    "64": "Finance",
    "65": "Assurance",
    "66": "Finance",
    "68": "Immobilier",
    # Activités spécialisées
    "69": "Services",
    "70": "Conseil",
    "71": "Ingénierie",
    "72": "R&D",
    "73": "Communication",
    "74": "Design",
    "75": "Santé animale",
    # Services administratifs
    "77": "Services",
    "78": "RH",
    "79": "Tourisme",
    "80": "Sécurité",
    "81": "Services",
    "82": "Services",
    # Public, enseignement, santé
    "84": "Public",
    "85": "Formation",
    "86": "Santé",
    "87": "Social",
    "88": "Social",
    # Arts, spectacles, loisirs
    "90": "Culture",
    "91": "Culture",
    "92": "Jeux",
    "93": "Sport",
    # Autres services
    "94": "Associatif",
    "95": "Services",
    "96": "Services",
}

# Fallback when neither the sector field nor the NAF code resolves
GENERIC_SECTOR = "Services"

# English labels accepted in the explicit sector field
SECTOR_ALIASES: Dict[str, str] = {
    "agriculture": "Agriculture",
    "farming": "Agriculture",
    "construction": "BTP",
    "technology": "Numérique",
    "tech": "Numérique",
    "digital": "Numérique",
    "manufacturing": "Industrie",
    "industry": "Industrie",
    "retail": "Commerce",
    "trade": "Commerce",
    "healthcare": "Santé",
    "health": "Santé",
    "energy": "Énergie",
    "transport": "Transport",
    "logistics": "Logistique",
    "tourism": "Tourisme",
    "services": "Services",
    "culture": "Culture",
    "food": "Agroalimentaire",
    "environment": "Environnement",
    "research": "R&D",
    "education": "Formation",
}

# ============================================================
# Title hard-filter keywords per sector
# A candidate whose title contains one of these is dropped.
# ============================================================
SECTOR_EXCLUSIONS: Dict[str, List[str]] = {
    # Primaire: kein Kultur/Medien
    "Agriculture": ["musique", "musical", "cinéma", "audiovisuel", "film", "spectacle", "théâtre", "danse", "jeux vidéo"],
    "Sylviculture": ["musique", "cinéma", "audiovisuel", "spectacle", "théâtre"],
    "Pêche": ["musique", "cinéma", "audiovisuel", "spectacle", "théâtre", "agricole terrestre"],
    # Industrie
    "Industrie": ["musique", "musical", "spectacle", "théâtre", "danse", "artistique"],
    "Agroalimentaire": ["musique", "cinéma", "spectacle", "numérique", "logiciel"],
    "Textile": ["musique", "cinéma", "agricole", "informatique"],
    "Bois": ["musique", "cinéma", "spectacle", "numérique"],
    "Chimie": ["musique", "cinéma", "spectacle", "artistique", "agricole"],
    "Pharmacie": ["musique", "cinéma", "spectacle", "agricole", "bâtiment"],
    "Plasturgie": ["musique", "cinéma", "spectacle", "agricole"],
    "Métallurgie": ["musique", "cinéma", "spectacle", "agricole", "artistique"],
    "Électronique": ["musique", "spectacle", "théâtre", "agricole", "élevage"],
    "Mécanique": ["musique", "cinéma", "spectacle", "artistique"],
    "Automobile": ["musique", "cinéma", "spectacle", "agricole", "artistique"],
    "Aéronautique": ["musique", "cinéma", "spectacle", "agricole", "artistique"],
    # Bau
    "BTP": ["musique", "musical", "cinéma", "film", "spectacle", "artistique", "agricole"],
    "Matériaux": ["musique", "cinéma", "spectacle", "artistique"],
    # Dienstleistungen
    "Commerce": ["musique", "musical", "cinéma", "film", "spectacle"],
    "Transport": ["musique", "cinéma", "spectacle", "agricole"],
    "Logistique": ["musique", "cinéma", "spectacle", "artistique"],
    "Tourisme": ["industrie lourde", "métallurgie", "chimie"],
    "Restauration": ["industrie lourde", "métallurgie", "chimie"],
    # Tech
    "Numérique": ["agriculture", "élevage", "pêche", "sylviculture", "spectacle vivant"],
    "Télécommunications": ["agriculture", "élevage", "spectacle", "cinéma"],
    "Édition": ["métallurgie", "chimie", "agriculture"],
    # Finanzen
    "Finance": ["musique", "cinéma", "spectacle", "agricole", "artisanat"],
    "Assurance": ["musique", "cinéma", "spectacle", "agricole"],
    "Immobilier": ["musique", "cinéma", "spectacle", "agricole"],
    # Beratung
    "Conseil": ["musique", "cinéma", "spectacle", "agricole"],
    "Ingénierie": ["musique", "cinéma", "spectacle", "artistique"],
    "Design": [],
    # Gesundheit & Soziales
    "Santé": ["musique", "cinéma", "spectacle", "agricole", "industrie lourde"],
    "Social": ["industrie", "manufacture", "métallurgie"],
    "Santé animale": ["musique", "cinéma", "spectacle", "industrie"],
    # Umwelt & Energie
    "Environnement": ["spectacle", "cinéma", "musique"],
    "Énergie": ["spectacle", "cinéma", "musique", "artistique"],
    # Offen für fast alles
    "Culture": [],
    "Audiovisuel": [],
    "R&D": [],
    "Formation": [],
    "Sport": [],
    "Associatif": [],
    "Communication": [],
    "Services": [],
    "Public": [],
}

# Denylist for sectors that are not in SECTOR_EXCLUSIONS
GENERIC_EXCLUSIONS: List[str] = ["jeux vidéo", "spectacle vivant", "production cinématographique"]

# ============================================================
# Positive indicators per sector (thematic keywords)
# ============================================================
SECTOR_INDICATOR_KEYWORDS: Dict[str, List[str]] = {
    "Agriculture": ["agricole", "agriculture", "élevage", "exploitation agricole", "filière agricole", "pac", "feader", "rural", "fermier", "paysan", "maraîcher", "viticulture", "arboriculture"],
    "Sylviculture": ["forestier", "forêt", "bois", "sylviculture", "filière bois", "exploitation forestière"],
    "Pêche": ["pêche", "pêcheur", "aquaculture", "maritime", "conchyliculture", "ostréiculture", "feamp"],
    "Agroalimentaire": ["agroalimentaire", "alimentaire", "transformation alimentaire", "iaa", "food", "agro-industrie"],
    "Textile": ["textile", "habillement", "confection", "mode", "couture", "tissu", "vêtement"],
    "Bois": ["bois", "menuiserie", "charpente", "ébénisterie", "biosourcé", "filière bois", "scierie"],
    "Papier": ["papier", "carton", "emballage", "imprimerie", "édition"],
    "Chimie": ["chimie", "chimique", "pétrochimie", "produits chimiques"],
    "Pharmacie": ["pharmaceutique", "pharmacie", "médicament", "biotech", "biotechnologie", "santé humaine"],
    "Plasturgie": ["plastique", "plasturgie", "caoutchouc", "polymère", "composite"],
    "Matériaux": ["matériaux", "verre", "céramique", "béton", "ciment", "matériaux de construction"],
    "Métallurgie": ["métallurgie", "métal", "sidérurgie", "fonderie", "forge", "usinage", "chaudronnerie"],
    "Électronique": ["électronique", "électrique", "composant", "semi-conducteur", "microélectronique", "capteur"],
    "Mécanique": ["mécanique", "machine", "équipement", "outillage", "robotique", "automatisation"],
    "Automobile": ["automobile", "véhicule", "constructeur", "équipementier", "mobilité"],
    "Aéronautique": ["aéronautique", "aérospatial", "aviation", "spatial", "défense", "naval"],
    "Ameublement": ["meuble", "ameublement", "mobilier", "agencement"],
    "Industrie": ["industriel", "industrie", "manufacture", "usine", "production industrielle", "atelier", "fabrication"],
    "BTP": ["bâtiment", "construction", "travaux publics", "btp", "chantier", "génie civil", "rénovation", "maîtrise d'ouvrage"],
    "Commerce": ["commerce", "commercial", "retail", "négoce", "distribution", "vente", "détail", "gros"],
    "Transport": ["transport", "mobilité", "fret", "routier", "ferroviaire", "maritime", "aérien", "multimodal"],
    "Logistique": ["logistique", "entreposage", "supply chain", "stockage", "manutention"],
    "Tourisme": ["tourisme", "touristique", "hébergement", "hôtellerie", "camping", "loisirs", "accueil"],
    "Restauration": ["restauration", "restaurant", "traiteur", "café", "hôtellerie-restauration"],
    "Numérique": ["numérique", "digital", "logiciel", "informatique", "tech", "startup", "saas", "cloud", "data", "intelligence artificielle"],
    "Télécommunications": ["télécom", "télécommunications", "réseau", "fibre", "mobile", "5g"],
    "Édition": ["édition", "éditeur", "livre", "presse", "média"],
    "Audiovisuel": ["audiovisuel", "cinéma", "film", "production audiovisuelle", "musique", "musical", "jeux vidéo", "animation"],
    "Finance": ["finance", "financier", "banque", "bancaire", "fintech", "investissement"],
    "Assurance": ["assurance", "assureur", "mutuelle", "prévoyance", "insurtech"],
    "Immobilier": ["immobilier", "foncier", "promotion", "gestion immobilière", "proptech"],
    "Conseil": ["conseil", "consulting", "consultant", "expertise", "accompagnement", "audit"],
    "Ingénierie": ["ingénierie", "bureau d'études", "conception", "architecture"],
    "Design": ["design", "création", "graphisme", "stylisme", "designer"],
    "Communication": ["communication", "publicité", "marketing", "agence", "média", "événementiel"],
    "RH": ["ressources humaines", "recrutement", "formation professionnelle", "emploi", "intérim"],
    "Santé": ["santé", "médical", "médecine", "hospitalier", "soins", "ehpad", "clinique"],
    "Social": ["social", "médico-social", "aide à domicile", "handicap", "insertion", "ess"],
    "Santé animale": ["vétérinaire", "animal", "animalier", "élevage"],
    "Culture": ["culture", "culturel", "artistique", "patrimoine", "musée", "spectacle vivant"],
    "Sport": ["sport", "sportif", "équipement sportif", "club", "fédération"],
    "Environnement": ["environnement", "écologie", "déchet", "recyclage", "économie circulaire", "biodiversité", "eau"],
    "Énergie": ["énergie", "énergétique", "renouvelable", "électricité", "gaz", "photovoltaïque", "éolien", "hydrogène", "décarbonation"],
    "R&D": ["recherche", "développement", "r&d", "innovation", "laboratoire", "brevet", "expérimentation"],
    "Formation": ["formation", "enseignement", "éducation", "apprentissage", "compétences", "école"],
    "Associatif": ["association", "associatif", "ong", "fondation", "bénévole"],
    "Sécurité": ["sécurité", "surveillance", "gardiennage", "protection"],
    "Services": ["services", "prestation", "entreprise de services"],
}

# ============================================================
# Region indicators (thematic keywords)
# ============================================================
REGION_INDICATOR_KEYWORDS: Dict[str, List[str]] = {
    "Île-de-France": ["île-de-france", "francilien", "paris", "grand paris"],
    "Auvergne-Rhône-Alpes": ["auvergne-rhône-alpes", "auvergne", "rhône-alpes", "lyon", "grenoble"],
    "Nouvelle-Aquitaine": ["nouvelle-aquitaine", "aquitaine", "bordeaux", "limousin", "poitou"],
    "Occitanie": ["occitanie", "toulouse", "montpellier", "pyrénées"],
    "Hauts-de-France": ["hauts-de-france", "lille", "picardie", "nord-pas-de-calais"],
    "Provence-Alpes-Côte d'Azur": ["provence", "côte d'azur", "paca", "marseille", "nice"],
    "Grand Est": ["grand est", "alsace", "lorraine", "champagne", "strasbourg"],
    "Pays de la Loire": ["pays de la loire", "nantes", "angers", "vendée"],
    "Bretagne": ["bretagne", "breton", "rennes", "brest"],
    "Normandie": ["normandie", "normand", "rouen", "caen"],
    "Bourgogne-Franche-Comté": ["bourgogne", "franche-comté", "dijon", "besançon"],
    "Centre-Val de Loire": ["centre-val de loire", "val de loire", "orléans", "tours"],
    "Corse": ["corse", "ajaccio", "bastia"],
    "Guadeloupe": ["guadeloupe", "outre-mer"],
    "Martinique": ["martinique", "outre-mer"],
    "Guyane": ["guyane", "outre-mer"],
    "La Réunion": ["réunion", "outre-mer"],
    "Mayotte": ["mayotte", "outre-mer"],
}

# Applied to every profile
UNIVERSAL_BUSINESS_KEYWORDS: List[str] = [
    "pme",
    "tpe",
    "investissement",
    "croissance",
    "compétitivité",
    "création d'entreprise",
]

# Removed from activity labels and descriptions before term extraction
STOPWORDS: List[str] = [
    "pour", "avec", "dans", "sans", "autre", "autres", "plus", "moins", "très",
    "être", "avoir", "faire", "tout", "tous", "leur", "leurs", "dont",
]

# Additional filler words for free-text descriptions
DESCRIPTION_STOPWORDS: List[str] = [
    "entreprise", "société", "activité", "notre", "votre", "cette", "leurs",
]

# ============================================================
# Legal form -> entity types used in eligibility lists
# ============================================================
LEGAL_FORM_TO_ENTITY: Dict[str, List[str]] = {
    # Sociétés de capitaux
    "SASU": ["Entreprise", "PME", "TPE", "Startup", "Société", "Société commerciale"],
    "SAS": ["Entreprise", "PME", "ETI", "Startup", "Société", "Société commerciale"],
    "SA": ["Entreprise", "PME", "ETI", "GE", "Société", "Société commerciale"],
    # SARL
    "SARLU": ["Entreprise", "TPE", "Société", "Société commerciale"],
    "SARL": ["Entreprise", "PME", "TPE", "Société", "Société commerciale"],
    "EURL": ["Entreprise", "TPE", "Société", "Société commerciale"],
    # Sociétés de personnes
    "SNC": ["Entreprise", "PME", "TPE", "Société", "Société de personnes"],
    "SCS": ["Entreprise", "PME", "Société", "Société de personnes"],
    "SCA": ["Entreprise", "PME", "ETI", "Société", "Société de personnes"],
    # Entrepreneurs individuels
    "EIRL": ["Entreprise", "TPE", "Indépendant", "Entrepreneur individuel"],
    "EI": ["Entreprise", "TPE", "Indépendant", "Entrepreneur individuel"],
    "Auto-entrepreneur": ["Entreprise", "TPE", "Indépendant", "Micro-entreprise", "Travailleur indépendant"],
    "Micro-entreprise": ["Entreprise", "TPE", "Indépendant", "Micro-entreprise", "Travailleur indépendant"],
    "Profession libérale": ["Entreprise", "TPE", "Indépendant", "Profession libérale", "Travailleur indépendant"],
    "Artisan": ["Entreprise", "TPE", "Artisan", "Indépendant", "Métiers d'art"],
    "Commerçant": ["Entreprise", "TPE", "Commerçant", "Commerce"],
    # Sociétés civiles
    "SCI": ["Société civile", "Société civile immobilière", "Immobilier"],
    "SCM": ["Société civile", "Société civile de moyens", "Profession libérale"],
    "SCP": ["Société civile", "Société civile professionnelle", "Profession libérale"],
    "SELARL": ["Société", "Société d'exercice libéral", "Profession libérale"],
    # Agricole
    "GAEC": ["Entreprise agricole", "Exploitation agricole", "Agriculture", "Groupement agricole"],
    "EARL": ["Entreprise agricole", "Exploitation agricole", "Agriculture", "TPE", "PME"],
    "SCEA": ["Entreprise agricole", "Exploitation agricole", "Agriculture", "Société civile"],
    "Exploitant agricole": ["Entreprise agricole", "Exploitation agricole", "Agriculture", "TPE", "Indépendant"],
    # Coopératives et ESS
    "SCOP": ["Entreprise", "Coopérative", "ESS", "PME", "Économie sociale et solidaire"],
    "SCIC": ["Entreprise", "Coopérative", "ESS", "Économie sociale et solidaire", "Intérêt collectif"],
    "Coopérative agricole": ["Coopérative", "Agriculture", "ESS", "Coopérative agricole"],
    "Coopérative": ["Coopérative", "ESS", "Économie sociale et solidaire"],
    # Associations et fondations
    "Association loi 1901": ["Association", "Organisme à but non lucratif", "OBNL", "ESS"],
    "Association": ["Association", "Organisme à but non lucratif", "OBNL", "ESS"],
    "Fondation": ["Fondation", "Organisme à but non lucratif", "OBNL", "Mécénat"],
    "Fonds de dotation": ["Fondation", "Organisme à but non lucratif", "OBNL", "Mécénat"],
    "Mutuelle": ["Mutuelle", "ESS", "Organisme complémentaire", "Économie sociale et solidaire"],
    # Public
    "EPIC": ["Établissement public", "Organisme public", "EPIC"],
    "SEM": ["Société d'économie mixte", "Organisme public", "Collectivité"],
    "SPL": ["Société publique locale", "Organisme public", "Collectivité"],
    "GIE": ["Groupement", "GIE", "Groupement d'intérêt économique", "Entreprise"],
}

DEFAULT_ENTITY_TYPES: List[str] = ["Entreprise", "PME", "TPE"]
UNKNOWN_FORM_ENTITY_TYPES: List[str] = ["Entreprise"]
ASSOCIATION_ENTITY_TYPES: List[str] = ["Association", "Organisme à but non lucratif", "OBNL", "ESS"]

# Eligibility entries every company satisfies
GENERIC_ENTITY_ENTRIES: List[str] = ["entreprise", "société", "tous", "toutes entreprises"]

# ============================================================
# Agency boost tiers (checked in order, first match wins)
# ============================================================
AGENCY_TIERS: List[Tuple[str, int]] = [
    # Nationale Strategie-Agenturen
    ("Bpifrance", 5),
    ("BPI France", 5),
    ("ADEME", 5),
    ("France 2030", 5),
    ("Agence Nationale de la Recherche", 5),
    ("ANR", 5),
    ("Caisse des Dépôts", 5),
    ("Banque des Territoires", 5),
    # EU
    ("Commission européenne", 5),
    ("Union européenne", 5),
    ("European Commission", 5),
    ("Horizon Europe", 5),
    ("FEDER", 5),
    ("FEADER", 5),
    ("FEAMP", 5),
    ("FSE", 5),
    ("EIC", 5),
    # Sektorale Agenturen
    ("FranceAgriMer", 4),
    ("Agence de l'eau", 4),
    ("Agence Bio", 4),
    ("ANAH", 4),
    ("AGEFIPH", 4),
    ("Business France", 4),
    ("Atout France", 4),
    ("CNC", 4),
    ("INPI", 4),
    # Innovation
    ("French Tech", 3),
    ("Pôle de compétitivité", 3),
    # Regionen
    ("Conseil Régional", 3),
    ("Région", 3),
    # Lokal und Netzwerke
    ("Conseil Départemental", 2),
    ("Département", 2),
    ("Métropole", 2),
    ("CCI", 2),
    ("Chambre de Commerce", 2),
    ("Chambre d'Agriculture", 2),
    ("CMA", 2),
    ("France Active", 2),
    ("Initiative France", 2),
    ("Réseau Entreprendre", 2),
    ("France Travail", 2),
    ("OPCO", 2),
    ("Communauté de Communes", 1),
    ("Commune", 1),
    ("Mairie", 1),
    ("LEADER", 1),
]


def _freeze_lists(table: Mapping[str, Iterable[str]]) -> Mapping[str, Tuple[str, ...]]:
    return MappingProxyType({key: tuple(values) for key, values in table.items()})


@dataclass(frozen=True)
class KeywordTables:
    """Read-only bundle of lookup tables injected into analyzer and engine."""

    naf_sectors: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(NAF_SECTOR_MAP))
    )
    sector_aliases: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(SECTOR_ALIASES))
    )
    sector_exclusions: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: _freeze_lists(SECTOR_EXCLUSIONS)
    )
    generic_exclusions: Tuple[str, ...] = tuple(GENERIC_EXCLUSIONS)
    sector_indicators: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: _freeze_lists(SECTOR_INDICATOR_KEYWORDS)
    )
    region_indicators: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: _freeze_lists(REGION_INDICATOR_KEYWORDS)
    )
    universal_keywords: Tuple[str, ...] = tuple(UNIVERSAL_BUSINESS_KEYWORDS)
    stopwords: frozenset = frozenset(STOPWORDS)
    description_stopwords: frozenset = frozenset(DESCRIPTION_STOPWORDS)
    legal_form_entities: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: _freeze_lists(LEGAL_FORM_TO_ENTITY)
    )
    agency_tiers: Tuple[Tuple[str, int], ...] = tuple(AGENCY_TIERS)

    def known_sectors(self) -> List[str]:
        """All sector labels that have an exclusion or indicator entry."""
        return sorted(set(self.sector_exclusions) | set(self.sector_indicators))

    def exclusions_for(self, sector: str) -> Tuple[str, ...]:
        """Title denylist for a sector (generic list for unknown sectors)."""
        if sector in self.sector_exclusions:
            return self.sector_exclusions[sector]
        return self.generic_exclusions

    def with_extra_exclusions(self, extra: Mapping[str, Iterable[str]]) -> "KeywordTables":
        """Return a copy whose denylists are extended by configuration."""
        if not extra:
            return self
        merged: Dict[str, List[str]] = {k: list(v) for k, v in self.sector_exclusions.items()}
        for sector, keywords in extra.items():
            merged.setdefault(sector, [])
            for keyword in keywords:
                keyword = keyword.lower()
                if keyword not in merged[sector]:
                    merged[sector].append(keyword)
        return KeywordTables(
            naf_sectors=self.naf_sectors,
            sector_aliases=self.sector_aliases,
            sector_exclusions=_freeze_lists(merged),
            generic_exclusions=self.generic_exclusions,
            sector_indicators=self.sector_indicators,
            region_indicators=self.region_indicators,
            universal_keywords=self.universal_keywords,
            stopwords=self.stopwords,
            description_stopwords=self.description_stopwords,
            legal_form_entities=self.legal_form_entities,
            agency_tiers=self.agency_tiers,
        )


DEFAULT_TABLES = KeywordTables()
