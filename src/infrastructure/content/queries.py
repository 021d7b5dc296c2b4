"""
infrastructure.content.queries - GROQ queries against the CMS schema.

Document types and field names are the CMS's own (Norwegian) schema:
oppskrift = recipe, kategori = category, brukerprofil = profile options.
"""

ALL_RECIPES = """
*[_type == "oppskrift"] {
  _id,
  tittel,
  "image": image.asset->url,
  "kategorier": kategori[]->{ _id, name },
  porsjoner,
  totalKcal,
  totalMakros
}
"""

ALL_CATEGORIES = """
*[_type == "kategori"] {
  _id,
  name,
  description,
  "image": image.asset->url
}
"""

RECIPE_BY_ID = """
*[_type == "oppskrift" && _id == $id][0] {
  _id,
  tittel,
  "image": image.asset->url,
  beskrivelse,
  "kategorier": kategori[]->{ _id, name },
  porsjoner,
  "ingrediens": ingrediens[] {
    name,
    measurement { unit, unitQuantity },
    mengde,
    kcal,
    makros { protein, karbs, fett },
    kommentar
  },
  instruksjoner,
  notater,
  totalKcal,
  totalMakros,
  tilberedningstid
}
"""

DIETARY_OPTIONS = """
*[_type == "brukerprofil"][0].kostholdsbehov[] { navn, verdi, beskrivelse }
"""

ALLERGY_OPTIONS = """
*[_type == "brukerprofil"][0].vanligeAllergier[] { navn, beskrivelse }
"""

CUISINE_OPTIONS = """
*[_type == "brukerprofil"][0].kjokkenTyper[]-> {
  _id,
  name,
  description,
  "imageUrl": image.asset->url
}
"""
