"""
Bus lane operating hours published by the Tel Aviv-Yafo municipality
(Residents > Transportation > Roads), hand transcribed.

Hours are decimal (7 = 07:00, 17.5 = 17:30). Day classes:
    sun_thu  Sunday-Thursday
    fri      Friday and holiday eves
    sat      Saturday and holidays
allWeek marks permanent 24/7 lanes. Rows with section "default" were added
for streets that exist in GIS layer 611 but not in the municipal table;
their hours follow the nearest comparable lane.
"""
import logging
from typing import List

from errors import ScheduleTableError
from .models import ScheduleEntry

logger = logging.getLogger(__name__)

SCHEDULE_VERSION = "2026-02-22"

BUS_LANE_SCHEDULE = [
    {"street": 'אבן גבירול', "section": 'מדרום לצפון: מרחוב מרמורק עד רחוב ארלוזורוב', "sun_thu": [[7, 22]], "fri": [[7, 17]], "sat": None},
    {"street": 'אבן גבירול', "section": 'מצפון לדרום: מגשר הירקון עד רח׳ מרמורק', "sun_thu": [[7, 22]], "fri": [[7, 17]], "sat": None},
    {"street": 'אבן גבירול', "section": 'מדרום לצפון: מרחוב ארלוזורוב עד גשר הירקון', "sun_thu": [[7, 22]], "fri": [[7, 17]], "sat": None},
    {"street": 'אחד העם', "section": 'ממערב למזרח: מרחוב השחר עד רחוב אחוזת בית', "sun_thu": [[5, 20]], "fri": [[5, 18]], "sat": None},
    {"street": 'אילת', "section": 'בין אליפלט לגבולות', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'אצ"ל', "section": 'מצפון לדרום: מדרך ההגנה עד רחוב חנוך', "sun_thu": [[10, 19]], "fri": [[10, 16]], "sat": None},
    {"street": 'בוגרשוב', "section": 'ממזרח למערב: מרחוב טשרניחובסקי עד רחוב פינסקר', "sun_thu": [[8, 10], [15, 19]], "fri": [[8, 10], [15, 17]], "sat": None},
    {"street": 'בן יהודה', "section": 'לכיוון דרום: מדיזינגוף עד רחוב ז׳בוטינסקי', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'בן צבי', "section": 'ממזרח למערב: ממחלף חולון עד רחוב לבון', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},
    {"street": 'בן צבי', "section": 'ממערב למזרח: בין רחוב לבון למחלף חולון', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},
    {"street": 'דיזנגוף', "section": 'מדרום לצפון: מכיכר דיזנגוף עד רחוב ימיהו', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": [[16, 22]]},
    {"street": 'דיזנגוף', "section": 'מצפון לדרום: מרחוב בן גוריון עד כיכר דיזנגוף', "sun_thu": [[10, 21]], "fri": [[10, 17]], "sat": None},
    {"street": 'דיזנגוף', "section": 'מצפון לדרום: מדרך התערוכה עד רח׳ בן יהודה', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'דיזנגוף', "section": 'מצפון לדרום: מרחוב התניא עד שד׳ בן גוריון', "sun_thu": [[10, 21]], "fri": [[10, 17]], "sat": None},
    {"street": 'דרך בגין', "section": 'מצפון לדרום: משדרות שאול המלך עד רחוב החשמונאים, ומרחוב הרכבת עד רחוב ברזילי', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'דרך בגין', "section": 'מדרום לצפון: מרחוב השפלה עד רחוב יצחק שדה', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך בגין', "section": 'מדרום לצפון: מרחוב המסגר עד רחוב על פרשת דרכים', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך השלום', "section": 'לכיוון מערב מרחוב שדרד עד דרך הטייסים, מרחוב הרצליי, על רחוב הגבורה, ומשביל הרקפת עד רחוב יגאל אלון', "sun_thu": [[7, 19]], "fri": [[7, 17]], "sat": None},
    {"street": 'דרך חיל השריון', "section": 'מהתמחנית עד רחוב קיבוץ גלויות', "allWeek": True},
    {"street": 'דרך חיל השריון', "section": 'מהשילוב בין חיל השריון ואיילון דרום עד דרך בן צבי', "allWeek": True},
    {"street": 'דרך יפו', "section": 'ממערב למזרח: מרחוב גבולות עד רחוב נחלת בנימין', "sun_thu": [[5, 21]], "fri": [[5, 18]], "sat": None},
    {"street": 'נמיר', "section": 'מדרום לצפון: מדרך בגין עד רחוב פנקס, מנשר רוקח עד רחוב לבנון', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך נמיר', "section": 'משדרות רוקח [100 מטר מהצומת] עד תחנת הדלק בין רחוב לבנון לרחוב איינשטיין', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך נמיר', "section": 'מרחוב לבנון עד מחלף גלילות', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך נמיר', "section": 'מצפון לדרום: ממחלף גלילות עד רחוב ארלוזורוב', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך נמיר', "section": 'מצפון לדרום: מרחוב איינשטיין עד דרך בגין', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך שלמה', "section": 'ממזרח למערב: מרחוב צלנוב עד רחוב שניצלר', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'דרך שלמה', "section": 'ממערב למזרח: מרחוב שלבים עד רחוב הרצל', "sun_thu": [[7, 11], [14, 19]], "fri": [[7, 11], [14, 17]], "sat": None},
    {"street": 'שדרות שלמה', "section": 'בשני הכיוונים: משדרות הר ציון לרחוב צמח דוד', "sun_thu": [[8, 11], [14, 21]], "fri": [[8, 11], [14, 17]], "sat": None},
    {"street": 'החרש', "section": 'מצפון לדרום: מרחוב לה גרדיה עד דרך חיל השריון [כניסה ויציאה מהתמחנ"ת קומה 7]', "allWeek": True},
    {"street": 'החרש', "section": 'בשני הכיוונים: מרח׳ לה גארדיה עד רח׳ המסילה ב׳', "sun_thu": [[6, 21]], "fri": [[6, 17]], "sat": None},
    {"street": 'החשמונאים', "section": 'ממזרח למערב: מדרך בגין עד רחוב קרליבך ולרכב שמשקלו הכולל מעל 12 טון לאחר הבניינ מגדלי הארבעה', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'החשמונאים', "section": 'ממערב מזרח: משדרות רוטשילד עד דרך בגין', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'החשמונאים', "section": 'לכיוון מזרח: משדרות רוטשילד עד רחוב קרליבך', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'היינה', "section": 'מדרום לצפון: מרחוב יגאל ידין עד דרך בן צבי', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'היינה', "section": 'מצפון לדרום: מדרך בן צבי עד רחוב יגאל ידין', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'הכוכבים', "section": 'מדרום לצפון: מרחוב יוסף לוי עד שדרות דניאל', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'הלוחמים', "section": 'מדרום לצפון: מרחוב יונה הנביא עד רחוב אלנבי', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'הלוחמים', "section": 'בשני הכיוונים בין רחוב תל גיבורים לרחוב יגאל ידין', "sun_thu": [[6, 19]], "fri": [[6, 15]], "sat": None},
    {"street": 'המלך ג\'ורג\'', "section": 'מצפון לדרום: מכיכר מסריק עד שדרות בן ציון', "sun_thu": [[10, 19]], "fri": [[9, 16]], "sat": None},
    {"street": 'המסגר', "section": 'בשני הכיוונים: מרחוב לה גוארדיה עד דרך בגין', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'המלכה שלמציון', "section": 'לכיוון דרום: מדרך בגין עד רחוב שלמה', "sun_thu": [[10, 19]], "fri": [[10, 17]], "sat": None},
    {"street": 'הרכבת', "section": 'ממערב למזרח בקטע הרכבת בגין עד הרכבת ראש פינה', "sun_thu": [[5, 21]], "fri": [[7, 17]], "sat": None},
    {"street": 'הרצל', "section": 'מדרך שלמה עד דרך יפו', "sun_thu": [[7, 11], [14, 20]], "fri": [[7, 11], [14, 17]], "sat": None},
    {"street": 'העצל', "section": 'מדרך יפו עד רחוב אחד העם', "sun_thu": [[7, 20]], "fri": [[7, 17]], "sat": None},
    {"street": 'השחר', "section": 'מרחוב אלחנן עד רחוב אחד העם', "sun_thu": [[8, 20]], "fri": [[8, 16]], "sat": None},
    {"street": 'טיילת הרברט סמואל', "section": 'מצפון לדרום: מרחוב הרב קוק עד כרמלית', "sun_thu": [[7, 19]], "fri": None, "sat": None},
    {"street": 'יגאל אלון', "section": 'מדרום לצפון: מרחוב תובל עד דרך השלום', "sun_thu": [[7, 14]], "fri": None, "sat": None},
    {"street": 'יגאל אלון', "section": 'מצפון לדרום: מרח׳ קרמנצקי עד רחוב לה גרדיה', "sun_thu": [[7, 19]], "fri": None, "sat": None},
    {"street": 'יהודה המכבי', "section": 'ממזרח למערב: מדרך נמיר עד רחוב ויצמן', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'יפת', "section": 'לכיוון צפון: בין רחוב לואי פסטר ועד בית אשל', "sun_thu": [[5, 21]], "fri": [[5, 16]], "sat": [[17, 22]]},
    {"street": 'יצחק אלחנן', "section": 'ממערב למזרח: מרחוב הכרמל עד רחוב השחר', "sun_thu": [[8, 20]], "fri": [[8, 16]], "sat": None},
    {"street": 'יצחק אלחנן', "section": 'ממערב למזרח: מרחוב הכובשים עד רחוב הכרמל', "allWeek": True},
    {"street": 'ישראל טל', "section": 'לכיוון מזרח בקטע שבין דרך מנחם בגין לרחוב המסגר', "allWeek": True},
    {"street": 'לבון', "section": 'מדרום לצפון: בין רחוב בן צבי לרחוב קיבוץ גלויות', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},
    {"street": 'לבון', "section": 'מצפון לדרום: בין רחוב קיבוץ גלויות לרחוב בן צבי', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},
    {"street": 'לה גוארדיה', "section": 'ממזרח למערב: מדרך הטייסים עד כביש נתיבי איילון צפון', "sun_thu": [[7, 10]], "fri": [[7, 10]], "sat": None},
    {"street": 'מונטיפיורי', "section": 'ממזרח למערב: מרחוב אלנבי עד רחוב ויסר', "sun_thu": [[10, 19]], "fri": [[10, 17]], "sat": None},
    {"street": 'משה סנה', "section": 'לכיוון צפון בקטע מרח׳ בני אפרים עד רח׳ אלי תבין', "sun_thu": [[15, 19]], "fri": [[15, 17]], "sat": None},
    {"street": 'משה סנה', "section": 'לכיוון דרום בקטע מרח׳ אלי תבין עד רח׳ קרית שאול', "sun_thu": [[7, 10]], "fri": [[7, 10]], "sat": None},
    {"street": 'צה"ל', "section": 'ממזרח למערב: מרחוב דבורה הנביאה עד רחוב המצביעים', "allWeek": True},
    {"street": 'צלנוב', "section": 'מקטע: דרך שלמה עד הגדוד העברי', "sun_thu": [[7, 11], [14, 21]], "fri": [[7, 11], [14, 17]], "sat": None},
    {"street": 'צמח דוד', "section": 'מצפון לדרום: מרחוב לוינסקי עד דרך שלמה', "allWeek": True},
    {"street": 'קפלן', "section": 'לכיוון מערב: מגבעת התחמושת [צומת עזריאלי] עד רחוב דובנוב', "sun_thu": [[6, 10]], "fri": None, "sat": None},
    {"street": 'קפלן', "section": 'לכיוון מזרח: מרחוב לאונרדו דה וינצ׳י עד דרך בגין', "sun_thu": [[14, 19]], "fri": [[14, 17]], "sat": None},
    {"street": 'קרליבך', "section": 'ממערב למזרח: מרחוב החשמונאים עד דרך בגין', "sun_thu": [[8, 10]], "fri": [[8, 10]], "sat": None},
    {"street": 'קרליבך', "section": 'ממערב למזרח: מרחוב החשמונאים עד דרך בגין', "sun_thu": [[8, 10]], "fri": [[8, 10]], "sat": None},
    {"street": 'ראש פינה', "section": 'מצפון לדרום: מרחוב הרכבת עד רחוב לוינסקי', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'שדרות בן ציון', "section": 'לכיוון מערב בקטע מרח׳ תרסיט עד רח׳ המלך ג׳ורג׳', "sun_thu": [[8, 20]], "fri": [[8, 17]], "sat": None},
    {"street": 'שדרות בן ציון', "section": 'לכיוון מזרח בקטע מרח׳ המלך ג׳ורג׳ עד רח׳ תדסי', "sun_thu": [[8, 20]], "fri": [[8, 17]], "sat": None},
    {"street": 'שדרות הר ציון', "section": 'מדרום לצפון: מרחוב הקונגרס עד רחוב סלומון', "allWeek": True},
    {"street": 'שדרות ירושלים', "section": 'לכיוון צפון מרחוב שמחה הולצברג עד רחוב חיים', "sun_thu": [[5, 23]], "fri": [[5, 17]], "sat": None},
    {"street": 'שדרות ירושלים', "section": 'לכיוון דרום: שדרות הכנסייה עד רחוב שמחה הולצברג', "sun_thu": [[5, 23]], "fri": [[5, 17]], "sat": None},
    {"street": 'שדרות קרן קיימת לישראל', "section": 'בקטע שבין רח׳ לבנון לנתיבי איילון, בשני הכיוונים', "sat": None, "sun_thu": [[6, 10], [16, 19]], "fri": [[6, 10], [16, 17]]},
    {"street": 'שדרות רוטשילד', "section": 'לכיוון צפון בקטע מרח׳ נחלת בנימין עד רח׳ תרמולה', "sun_thu": [[8, 20]], "fri": [[8, 17]], "sat": None},
    {"street": 'שדרות רוטשילד', "section": 'לכיוון דרום בקטע מרח׳ מרמורק עד רח׳ בצלאל יפה', "sun_thu": [[8, 20]], "fri": [[8, 17]], "sat": None},
    {"street": 'שדרות רוקח ישראל', "section": 'בפניה שמאלה בלבד: משדרות רוקח מזרחה אל דרך נמיר לדרום', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'שלבים', "section": 'מדרום לצפון: מרחוב יגאל ידין עד רחוב קיבוץ גלויות', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'שלבים', "section": 'מצפון לדרום: מרחוב קיבוץ גלויות עד רחוב יגאל ידין', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'שלבים', "section": 'מדרום לצפון: מדרך בן צבי עד רחוב קיבוץ גלויות', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'שלבים', "section": 'מצפון לדרום: מרחוב קיבוץ גלויות עד דרך בן צבי', "sun_thu": [[5, 21]], "fri": [[5, 17]], "sat": None},
    {"street": 'תל גיבורים', "section": 'לכיוון דרום: מדרך בן צבי עד רחוב הלוחמים', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},
    {"street": 'תל גיבורים', "section": 'לכיוון צפון: מרחוב הלוחמים עד דרך בן צבי', "sun_thu": [[6, 10], [14, 19]], "fri": [[6, 10], [14, 17]], "sat": None},

    # Not in the municipal table; estimated from neighbouring lanes
    {"street": 'לוינסקי', "section": 'default', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'ארלוזורוב', "section": 'default', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
    {"street": 'ריינס', "section": 'מרחוב פרישמן עד רחוב דיזנגוף', "sun_thu": [[10, 21]], "fri": [[10, 17]], "sat": None},
    {"street": 'נחלת בנימין', "section": 'default', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'הכובשים', "section": 'default', "sun_thu": [[8, 20]], "fri": [[8, 16]], "sat": None},
    {"street": 'שאול המלך', "section": 'default', "sun_thu": [[5, 22]], "fri": [[5, 18]], "sat": None},
    {"street": 'יהודה הלוי', "section": 'default', "sun_thu": [[5, 22]], "fri": [[5, 17]], "sat": None},
]


def load_schedule_table(rows: List[dict] = None) -> List[ScheduleEntry]:
    """Build ScheduleEntry objects from the static table; fatal if it is empty"""
    rows = BUS_LANE_SCHEDULE if rows is None else rows
    if not rows:
        raise ScheduleTableError("Bus lane schedule table is empty")

    try:
        entries = [ScheduleEntry.from_dict(row) for row in rows]
    except (KeyError, TypeError, ValueError) as e:
        raise ScheduleTableError(f"Malformed schedule row: {e}") from e

    logger.info(f"Loaded {len(entries)} schedule entries (version {SCHEDULE_VERSION})")
    return entries
