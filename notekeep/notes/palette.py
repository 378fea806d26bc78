NOTE_COLORS = [
    "bg-white",
    "bg-red-200",
    "bg-orange-200",
    "bg-amber-200",
    "bg-lime-200",
    "bg-green-200",
    "bg-emerald-200",
    "bg-cyan-200",
    "bg-sky-200",
    "bg-indigo-200",
    "bg-purple-200",
    "bg-pink-200",
]

DEFAULT_COLOR = "bg-white"
