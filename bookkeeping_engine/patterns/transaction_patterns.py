"""
Transaction categorization patterns for small-business bookkeeping.
Patterns for Canadian business bank feeds, keyed to chart-of-accounts codes.
"""

# Rule priorities by rule class (higher is evaluated first)
# system/training rules override bank rules, which override merchant rules
RULE_CLASS_PRIORITIES = {
    "training": 120,
    "system": 110,
    "bank": 100,
    "financial": 90,
    "merchant": 80,
}


# Static rule catalog
# Each entry: id, pattern, match_type ('regex' or 'literal'), merchant label,
# category_code, confidence (0-100), priority, rule_class
SYSTEM_RULES = [
    # --- Training overrides ---
    {"id": "service-charge", "pattern": r"service\s*charge", "match_type": "regex",
     "merchant": "Service Charge", "category_code": "404", "confidence": 100,
     "priority": 120, "rule_class": "training"},
    {"id": "federal-payment-canada", "pattern": r"federal\s*payment\s*canada", "match_type": "regex",
     "merchant": "Government of Canada", "category_code": "260", "confidence": 100,
     "priority": 120, "rule_class": "training"},
    {"id": "send-etfr-fee", "pattern": r"send\s*e[\-\s]*tfr\s*fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 100,
     "priority": 125, "rule_class": "training"},

    # --- System: payment processor payouts and tax ---
    {"id": "stripe-payout", "pattern": r"stripe\s*(payout|transfer)", "match_type": "regex",
     "merchant": "Stripe", "category_code": "200", "confidence": 95,
     "priority": 110, "rule_class": "system"},
    {"id": "square-payout", "pattern": r"square\s*(inc|deposit|payout)", "match_type": "regex",
     "merchant": "Square", "category_code": "200", "confidence": 95,
     "priority": 110, "rule_class": "system"},
    {"id": "shopify-payout", "pattern": r"shopify\s*(payout|payments)", "match_type": "regex",
     "merchant": "Shopify", "category_code": "200", "confidence": 95,
     "priority": 110, "rule_class": "system"},
    {"id": "paypal-payout", "pattern": r"paypal\s*(transfer|payout)", "match_type": "regex",
     "merchant": "PayPal", "category_code": "200", "confidence": 90,
     "priority": 110, "rule_class": "system"},
    {"id": "gst-refund", "pattern": r"\b(gst|hst)\s*(refund|credit)", "match_type": "regex",
     "merchant": "Canada Revenue Agency", "category_code": "820", "confidence": 95,
     "priority": 110, "rule_class": "system"},
    {"id": "cra-payment", "pattern": r"\bcra\b|canada\s*revenue", "match_type": "regex",
     "merchant": "Canada Revenue Agency", "category_code": "505", "confidence": 95,
     "priority": 105, "rule_class": "system"},
    {"id": "mobile-deposit", "pattern": r"mobile\s*(cheque\s*)?deposit", "match_type": "regex",
     "merchant": None, "category_code": "200", "confidence": 85,
     "priority": 105, "rule_class": "system"},

    # --- Bank fees and charges ---
    {"id": "monthly-account-fee", "pattern": r"monthly\s*(account|plan)\s*fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 98,
     "priority": 100, "rule_class": "bank"},
    {"id": "nsf-fee", "pattern": r"\bnsf\s*(fee|charge)", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 98,
     "priority": 100, "rule_class": "bank"},
    {"id": "atm-fee", "pattern": r"\batm\s*fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 97,
     "priority": 100, "rule_class": "bank"},
    {"id": "overdraft-interest", "pattern": r"overdraft\s*(interest|fee|charge)", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 98,
     "priority": 100, "rule_class": "bank"},
    {"id": "e-transfer-fee", "pattern": r"e[\-\s]*(transfer|tfr)\s*fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 97,
     "priority": 100, "rule_class": "bank"},
    {"id": "wire-fee", "pattern": r"wire\s*(transfer\s*)?fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 96,
     "priority": 100, "rule_class": "bank"},
    {"id": "stop-payment-fee", "pattern": r"stop\s*payment\s*fee", "match_type": "regex",
     "merchant": None, "category_code": "404", "confidence": 96,
     "priority": 100, "rule_class": "bank"},
    {"id": "cheque-order", "pattern": r"cheque\s*(order|book)", "match_type": "regex",
     "merchant": None, "category_code": "453", "confidence": 90,
     "priority": 100, "rule_class": "bank"},
    {"id": "interest-earned", "pattern": r"interest\s*(paid|earned|credit)", "match_type": "regex",
     "merchant": None, "category_code": "270", "confidence": 95,
     "priority": 100, "rule_class": "bank"},
    {"id": "hydro-bill-payment", "pattern": r"mb[\-\s]*bill\s*payment.*hydro", "match_type": "regex",
     "merchant": None, "category_code": "442", "confidence": 98,
     "priority": 100, "rule_class": "bank"},
    {"id": "bell-bill-payment", "pattern": r"mb[\-\s]*bill\s*payment.*bell", "match_type": "regex",
     "merchant": "Bell Canada", "category_code": "489", "confidence": 98,
     "priority": 100, "rule_class": "bank"},
    {"id": "rogers-bill-payment", "pattern": r"mb[\-\s]*bill\s*payment.*rogers", "match_type": "regex",
     "merchant": "Rogers", "category_code": "489", "confidence": 98,
     "priority": 100, "rule_class": "bank"},

    # --- Financial: transfers, loans, payroll ---
    {"id": "internal-transfer", "pattern": r"internal\s*transfer", "match_type": "regex",
     "merchant": None, "category_code": "877", "confidence": 95,
     "priority": 90, "rule_class": "financial"},
    {"id": "transfer-to-savings", "pattern": r"transfer\s*to\s*savings", "match_type": "regex",
     "merchant": None, "category_code": "877", "confidence": 95,
     "priority": 90, "rule_class": "financial"},
    {"id": "account-transfer", "pattern": r"(transfer|tfr)\s*(to|from)\s*(chequing|checking|savings|account)",
     "match_type": "regex", "merchant": None, "category_code": "877", "confidence": 92,
     "priority": 85, "rule_class": "financial"},
    {"id": "atm-withdrawal", "pattern": r"atm\s*withdrawal", "match_type": "regex",
     "merchant": None, "category_code": "610", "confidence": 95,
     "priority": 90, "rule_class": "financial"},
    {"id": "loan-payment", "pattern": r"loan\s*(payment|pmt)", "match_type": "regex",
     "merchant": None, "category_code": "900", "confidence": 92,
     "priority": 90, "rule_class": "financial"},
    {"id": "credit-card-payment", "pattern": r"(visa|mastercard|amex|credit\s*card)\s*(payment|pmt)",
     "match_type": "regex", "merchant": None, "category_code": "800", "confidence": 92,
     "priority": 90, "rule_class": "financial"},
    {"id": "mortgage", "pattern": r"\bmortgage\b", "match_type": "regex",
     "merchant": None, "category_code": "900", "confidence": 90,
     "priority": 85, "rule_class": "financial"},
    {"id": "payroll", "pattern": r"\bpayroll\b", "match_type": "regex",
     "merchant": None, "category_code": "477", "confidence": 92,
     "priority": 90, "rule_class": "financial"},
    {"id": "insurance", "pattern": r"\binsurance\b|\bintact\s*ins", "match_type": "regex",
     "merchant": None, "category_code": "433", "confidence": 88,
     "priority": 85, "rule_class": "financial"},

    # --- Merchants: meals and entertainment ---
    {"id": "tim-hortons", "pattern": r"tim\s*hortons?", "match_type": "regex",
     "merchant": "Tim Hortons", "category_code": "420", "confidence": 96,
     "priority": 80, "rule_class": "merchant"},
    {"id": "starbucks", "pattern": r"\bstarbucks", "match_type": "regex",
     "merchant": "Starbucks", "category_code": "420", "confidence": 96,
     "priority": 80, "rule_class": "merchant"},
    {"id": "second-cup", "pattern": r"second\s*cup", "match_type": "regex",
     "merchant": "Second Cup", "category_code": "420", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "mcdonalds", "pattern": r"mcdonald'?s", "match_type": "regex",
     "merchant": "McDonald's", "category_code": "420", "confidence": 96,
     "priority": 80, "rule_class": "merchant"},
    {"id": "subway", "pattern": r"\bsubway\b", "match_type": "regex",
     "merchant": "Subway", "category_code": "420", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "burger-king", "pattern": r"burger\s*king", "match_type": "regex",
     "merchant": "Burger King", "category_code": "420", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "kfc", "pattern": r"\bkfc\b", "match_type": "regex",
     "merchant": "KFC", "category_code": "420", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "swiss-chalet", "pattern": r"swiss\s*chalet", "match_type": "regex",
     "merchant": "Swiss Chalet", "category_code": "420", "confidence": 96,
     "priority": 80, "rule_class": "merchant"},
    {"id": "boston-pizza", "pattern": r"boston\s*pizza", "match_type": "regex",
     "merchant": "Boston Pizza", "category_code": "420", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "wendys", "pattern": r"\bwendy'?s\b", "match_type": "regex",
     "merchant": "Wendy's", "category_code": "420", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "uber-eats", "pattern": r"uber\s*eats", "match_type": "regex",
     "merchant": "Uber Eats", "category_code": "420", "confidence": 93,
     "priority": 85, "rule_class": "merchant"},
    {"id": "skip-the-dishes", "pattern": r"skip\s*the\s*dishes", "match_type": "regex",
     "merchant": "Skip The Dishes", "category_code": "420", "confidence": 93,
     "priority": 80, "rule_class": "merchant"},
    {"id": "doordash", "pattern": r"door\s*dash", "match_type": "regex",
     "merchant": "DoorDash", "category_code": "420", "confidence": 93,
     "priority": 80, "rule_class": "merchant"},

    # --- Merchants: fuel and vehicle ---
    {"id": "petro-canada", "pattern": r"petro[\-\s]*can(ada)?", "match_type": "regex",
     "merchant": "Petro-Canada", "category_code": "449", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "esso", "pattern": r"\besso\b", "match_type": "regex",
     "merchant": "Esso", "category_code": "449", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "shell", "pattern": r"\bshell\b", "match_type": "regex",
     "merchant": "Shell", "category_code": "449", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "husky", "pattern": r"\bhusky\b", "match_type": "regex",
     "merchant": "Husky", "category_code": "449", "confidence": 93,
     "priority": 80, "rule_class": "merchant"},
    {"id": "ultramar", "pattern": r"\bultramar\b", "match_type": "regex",
     "merchant": "Ultramar", "category_code": "449", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "parking", "pattern": r"\bparking\b|\bimpark\b|\bgreen\s*p\b", "match_type": "regex",
     "merchant": None, "category_code": "449", "confidence": 90,
     "priority": 80, "rule_class": "merchant"},

    # --- Merchants: utilities and telecom ---
    {"id": "hydro-utility", "pattern": r"hydro\s*one|toronto\s*hydro|bc\s*hydro", "match_type": "regex",
     "merchant": "Hydro One", "category_code": "442", "confidence": 95,
     "priority": 95, "rule_class": "merchant"},
    {"id": "enbridge", "pattern": r"\benbridge\b", "match_type": "regex",
     "merchant": "Enbridge", "category_code": "445", "confidence": 95,
     "priority": 95, "rule_class": "merchant"},
    {"id": "bell", "pattern": r"\bbell\s*(canada|mobility)\b", "match_type": "regex",
     "merchant": "Bell Canada", "category_code": "489", "confidence": 95,
     "priority": 95, "rule_class": "merchant"},
    {"id": "rogers", "pattern": r"\brogers\b", "match_type": "regex",
     "merchant": "Rogers", "category_code": "489", "confidence": 94,
     "priority": 95, "rule_class": "merchant"},
    {"id": "telus", "pattern": r"\btelus\b", "match_type": "regex",
     "merchant": "Telus", "category_code": "489", "confidence": 95,
     "priority": 95, "rule_class": "merchant"},
    {"id": "fido", "pattern": r"\bfido\b", "match_type": "regex",
     "merchant": "Fido", "category_code": "489", "confidence": 94,
     "priority": 95, "rule_class": "merchant"},

    # --- Merchants: office, supplies, equipment ---
    {"id": "staples", "pattern": r"\bstaples\b", "match_type": "regex",
     "merchant": "Staples", "category_code": "453", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "grand-and-toy", "pattern": r"grand\s*(&|and)\s*toy", "match_type": "regex",
     "merchant": "Grand & Toy", "category_code": "453", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "home-depot", "pattern": r"home\s*depot", "match_type": "regex",
     "merchant": "Home Depot", "category_code": "455", "confidence": 92,
     "priority": 80, "rule_class": "merchant"},
    {"id": "rona", "pattern": r"\brona\b", "match_type": "regex",
     "merchant": "Rona", "category_code": "455", "confidence": 92,
     "priority": 80, "rule_class": "merchant"},
    {"id": "canadian-tire", "pattern": r"canadian\s*tire", "match_type": "regex",
     "merchant": "Canadian Tire", "category_code": "455", "confidence": 85,
     "priority": 80, "rule_class": "merchant"},
    {"id": "best-buy", "pattern": r"best\s*buy", "match_type": "regex",
     "merchant": "Best Buy", "category_code": "720", "confidence": 85,
     "priority": 80, "rule_class": "merchant"},
    {"id": "costco", "pattern": r"\bcostco\b", "match_type": "regex",
     "merchant": "Costco", "category_code": "453", "confidence": 85,
     "priority": 75, "rule_class": "merchant"},
    {"id": "amazon-web-services", "pattern": r"amazon\s*web\s*services|\baws\b", "match_type": "regex",
     "merchant": "Amazon Web Services", "category_code": "485", "confidence": 95,
     "priority": 90, "rule_class": "merchant"},
    {"id": "amazon", "pattern": r"\bamazon|\bamzn\b", "match_type": "regex",
     "merchant": "Amazon", "category_code": "453", "confidence": 80,
     "priority": 70, "rule_class": "merchant"},
    {"id": "canada-post", "pattern": r"canada\s*post", "match_type": "regex",
     "merchant": "Canada Post", "category_code": "425", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "purolator", "pattern": r"\bpurolator\b", "match_type": "regex",
     "merchant": "Purolator", "category_code": "425", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "fedex", "pattern": r"\bfedex\b", "match_type": "regex",
     "merchant": "FedEx", "category_code": "425", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},

    # --- Merchants: software and subscriptions ---
    {"id": "microsoft", "pattern": r"\bmicrosoft\b|\bmsft\b", "match_type": "regex",
     "merchant": "Microsoft", "category_code": "485", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "adobe", "pattern": r"\badobe\b", "match_type": "regex",
     "merchant": "Adobe", "category_code": "485", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "google-workspace", "pattern": r"google\s*\*?\s*(workspace|gsuite|g\s*suite)", "match_type": "regex",
     "merchant": "Google Workspace", "category_code": "485", "confidence": 95,
     "priority": 85, "rule_class": "merchant"},
    {"id": "google-ads", "pattern": r"google\s*\*?\s*ads|\badwords\b", "match_type": "regex",
     "merchant": "Google Ads", "category_code": "400", "confidence": 95,
     "priority": 85, "rule_class": "merchant"},
    {"id": "facebook-ads", "pattern": r"(facebook|\bfb|meta)\s*ads", "match_type": "regex",
     "merchant": "Facebook Ads", "category_code": "400", "confidence": 95,
     "priority": 85, "rule_class": "merchant"},
    {"id": "mailchimp", "pattern": r"\bmailchimp\b", "match_type": "regex",
     "merchant": "Mailchimp", "category_code": "400", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "dropbox", "pattern": r"\bdropbox\b", "match_type": "regex",
     "merchant": "Dropbox", "category_code": "485", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "zoom", "pattern": r"zoom\.us|\bzoom\s*video", "match_type": "regex",
     "merchant": "Zoom", "category_code": "485", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "slack", "pattern": r"\bslack\b", "match_type": "regex",
     "merchant": "Slack", "category_code": "485", "confidence": 94,
     "priority": 80, "rule_class": "merchant"},
    {"id": "intuit", "pattern": r"\bintuit\b|quickbooks", "match_type": "regex",
     "merchant": "QuickBooks", "category_code": "485", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "shopify-subscription", "pattern": r"\bshopify\b", "match_type": "regex",
     "merchant": "Shopify", "category_code": "485", "confidence": 88,
     "priority": 80, "rule_class": "merchant"},
    {"id": "netflix", "pattern": r"\bnetflix\b", "match_type": "regex",
     "merchant": "Netflix", "category_code": "485", "confidence": 90,
     "priority": 80, "rule_class": "merchant"},
    {"id": "spotify", "pattern": r"\bspotify\b", "match_type": "regex",
     "merchant": "Spotify", "category_code": "485", "confidence": 90,
     "priority": 80, "rule_class": "merchant"},

    # --- Merchants: travel ---
    {"id": "air-canada", "pattern": r"air\s*canada", "match_type": "regex",
     "merchant": "Air Canada", "category_code": "493", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "westjet", "pattern": r"\bwestjet\b", "match_type": "regex",
     "merchant": "WestJet", "category_code": "493", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "via-rail", "pattern": r"via\s*rail", "match_type": "regex",
     "merchant": "VIA Rail", "category_code": "493", "confidence": 95,
     "priority": 80, "rule_class": "merchant"},
    {"id": "uber-trip", "pattern": r"\buber\b(?!\s*eats)", "match_type": "regex",
     "merchant": "Uber", "category_code": "493", "confidence": 88,
     "priority": 80, "rule_class": "merchant"},
    {"id": "lyft", "pattern": r"\blyft\b", "match_type": "regex",
     "merchant": "Lyft", "category_code": "493", "confidence": 90,
     "priority": 80, "rule_class": "merchant"},
    {"id": "hotels", "pattern": r"\b(marriott|hilton|holiday\s*inn|best\s*western|fairmont)\b",
     "match_type": "regex", "merchant": None, "category_code": "493", "confidence": 92,
     "priority": 80, "rule_class": "merchant"},
    {"id": "airbnb", "pattern": r"\bairbnb\b", "match_type": "regex",
     "merchant": "Airbnb", "category_code": "493", "confidence": 90,
     "priority": 80, "rule_class": "merchant"},

    # --- Merchants: professional services ---
    {"id": "accounting-services", "pattern": r"\b(accounting|bookkeeping|cpa)\b", "match_type": "regex",
     "merchant": None, "category_code": "412", "confidence": 85,
     "priority": 75, "rule_class": "merchant"},
    {"id": "legal-services", "pattern": r"\blaw\s*(office|firm)|\blawyer|\blegal\b", "match_type": "regex",
     "merchant": None, "category_code": "441", "confidence": 85,
     "priority": 75, "rule_class": "merchant"},
]


# Known merchant labels for fuzzy matching
# Merchant-class catalog rules with a label are indexed as well
KNOWN_MERCHANTS = [
    {"label": "Tim Hortons", "category_code": "420"},
    {"label": "Starbucks", "category_code": "420"},
    {"label": "Second Cup", "category_code": "420"},
    {"label": "McDonald's", "category_code": "420"},
    {"label": "Burger King", "category_code": "420"},
    {"label": "Swiss Chalet", "category_code": "420"},
    {"label": "Boston Pizza", "category_code": "420"},
    {"label": "Pizza Pizza", "category_code": "420"},
    {"label": "Domino's Pizza", "category_code": "420"},
    {"label": "A&W", "category_code": "420"},
    {"label": "Harvey's", "category_code": "420"},
    {"label": "Petro-Canada", "category_code": "449"},
    {"label": "Esso", "category_code": "449"},
    {"label": "Shell", "category_code": "449"},
    {"label": "Pioneer", "category_code": "449"},
    {"label": "Staples", "category_code": "453"},
    {"label": "Grand & Toy", "category_code": "453"},
    {"label": "Home Depot", "category_code": "455"},
    {"label": "Canadian Tire", "category_code": "455"},
    {"label": "Lowe's", "category_code": "455"},
    {"label": "Microsoft", "category_code": "485"},
    {"label": "Adobe", "category_code": "485"},
    {"label": "Dropbox", "category_code": "485"},
    {"label": "QuickBooks", "category_code": "485"},
    {"label": "Canada Post", "category_code": "425"},
    {"label": "Purolator", "category_code": "425"},
    {"label": "Air Canada", "category_code": "493"},
    {"label": "WestJet", "category_code": "493"},
    {"label": "Telus", "category_code": "489"},
    {"label": "Rogers", "category_code": "489"},
    {"label": "Enbridge", "category_code": "445"},
]


# Ambiguous transfer shapes: person-to-person transfers whose purpose is unknown
# Fee lines are excluded so they reach the bank fee rules
TRANSFER_SHAPE_PATTERNS = [
    r"\b(?:e[\-\s]*transfer|e[\-\s]*tfr|etfr)\b(?!\s*fee)",
    r"\binterac\s*(?:money\s*)?transfer\b(?!\s*fee)",
    r"\bemail\s*money\s*transfer\b(?!\s*fee)",
    r"\bemt\b(?!\s*fee)",
    r"\bsend\s*money\b(?!\s*fee)",
]


# Purpose keyword families for ambiguous transfers
# Keywords match at word starts; the matched family with the highest
# base confidence wins, ties keep declaration order
TRANSFER_CONTEXT_FAMILIES = [
    {
        "name": "rent",
        "keywords": ["rent", "rental", "lease", "landlord", "property", "apartment", "condo"],
        "category_code": "469",
        "confidence": 90,
        "description": "Rent",
    },
    {
        "name": "utilities",
        "keywords": ["hydro", "electric", "gas", "water", "utility", "utilities",
                     "internet", "phone", "cable", "wifi"],
        "category_code": "442",
        "confidence": 85,
        "description": "Utilities",
    },
    {
        "name": "professional_services",
        "keywords": ["contractor", "plumber", "electrician", "handyman", "repair",
                     "service", "maintenance", "fix", "invoice", "consult"],
        "category_code": "441",
        "confidence": 85,
        "description": "Professional Services",
    },
    {
        "name": "personal",
        "keywords": ["family", "friend", "personal", "gift", "birthday",
                     "wedding", "christmas", "holiday"],
        "category_code": "877",
        "confidence": 75,
        "description": "Personal / Gift",
    },
    {
        "name": "food",
        "keywords": ["restaurant", "food", "dinner", "lunch", "coffee", "drink", "bar", "pub"],
        "category_code": "420",
        "confidence": 75,
        "description": "Meals & Entertainment",
    },
    {
        "name": "loan_investment",
        "keywords": ["loan", "debt", "owe", "repay", "invest", "savings"],
        "category_code": "900",
        "confidence": 80,
        "description": "Loan / Investment",
    },
]


# Amount tiers for transfers with no purpose keyword
# (minimum absolute amount, confidence), evaluated top down
TRANSFER_AMOUNT_TIERS = [
    (5000, 45),
    (1000, 35),
    (0, 25),
]
