"""
Prelude — Macros and runtime support prepended to every translation unit.

The prelude is added when the lowered body is handed to the toolchain; it
is not part of the pipeline output, so re-lowering lowered text never sees
it. The profiler runtime is only compiled with `-DCS_PROFILE_BUILD` and
flushes `<symbol> <count>` lines to `$CS_PROFILE_OUT` at exit.
"""

PROFILE_ENV_VAR = "CS_PROFILE_OUT"
PROFILE_BUILD_MACRO = "CS_PROFILE_BUILD"

_MACROS = r"""// --- C-Script prelude ---
#include <stdio.h>
#include <stdint.h>
#include <stddef.h>
#include <stdlib.h>
#include <string.h>

#define print(...) printf(__VA_ARGS__)
#if defined(__GNUC__) || defined(__clang__)
  #define likely(x)   __builtin_expect(!!(x),1)
  #define unlikely(x) __builtin_expect(!!(x),0)
#else
  #define likely(x)   (x)
  #define unlikely(x) (x)
#endif

#define CS_CONCAT2(a,b) a##b
#define CS_CONCAT(a,b)  CS_CONCAT2(a,b)
#define CS_DEFER(body) for (int CS_CONCAT(_cs_defer_, __LINE__) = 0; \
                             CS_CONCAT(_cs_defer_, __LINE__) == 0; \
                             (void)(body), CS_CONCAT(_cs_defer_, __LINE__)=1)

#define CS_SWITCH_EXHAUSTIVE(T, expr) do { int __cs_hit=0; T __cs_v=(expr); switch(__cs_v){
#define CS_CASE(x) case x: __cs_hit=1
#define CS_SWITCH_END(T, expr) default: break; } if(!__cs_hit) cs__enum_assert_##T((int)__cs_v); } while(0)

#if defined(_MSC_VER)
  #define CS_PRAGMA_PUSH __pragma(warning(push))
  #define CS_PRAGMA_POP  __pragma(warning(pop))
  #define CS_PRAGMA_RELAX __pragma(warning(disable:4244 4267 4018 4389))
#else
  #define CS_PRAGMA_PUSH _Pragma("GCC diagnostic push")
  #define CS_PRAGMA_POP  _Pragma("GCC diagnostic pop")
  #define CS_PRAGMA_RELAX _Pragma("GCC diagnostic ignored \"-Wconversion\"") \
                          _Pragma("GCC diagnostic ignored \"-Wsign-conversion\"")
#endif
#define CS_UNSAFE_BEGIN do { CS_PRAGMA_PUSH; CS_PRAGMA_RELAX; } while(0)
#define CS_UNSAFE_END   do { CS_PRAGMA_POP; } while(0)

#if defined(_MSC_VER)
  #define CS_HOT
#else
  #define CS_HOT __attribute__((hot))
#endif
"""

_PROFILER = r"""
#ifdef CS_PROFILE_BUILD
typedef struct { const char* name; unsigned long long count; } _cs_prof_ent;
static _cs_prof_ent* _cs_prof_tbl = 0;
static size_t _cs_prof_cap = 0, _cs_prof_len = 0;

static void _cs_prof_flush(void){
    const char* path = getenv("CS_PROFILE_OUT");
    FILE* f;
    if(!path) return;
    f = fopen(path, "wb");
    if(!f) return;
    for(size_t i=0;i<_cs_prof_len;i++){
        if(_cs_prof_tbl[i].name){
            fprintf(f, "%s %llu\n", _cs_prof_tbl[i].name, _cs_prof_tbl[i].count);
        }
    }
    fclose(f);
}

#if defined(__GNUC__) || defined(__clang__)
__attribute__((constructor))
#endif
static void _cs_prof_ctor(void){ atexit(_cs_prof_flush); }

static void cs_prof_hit(const char* name){
    for(size_t i=0;i<_cs_prof_len;i++){
        if(strcmp(_cs_prof_tbl[i].name,name)==0){ _cs_prof_tbl[i].count++; return; }
    }
    if(_cs_prof_len==_cs_prof_cap){
        size_t ncap = _cs_prof_cap ? _cs_prof_cap*2 : 32;
        _cs_prof_ent* grown = (_cs_prof_ent*)realloc(_cs_prof_tbl, ncap*sizeof(_cs_prof_ent));
        if(!grown) return;
        _cs_prof_tbl = grown;
        _cs_prof_cap = ncap;
    }
    _cs_prof_tbl[_cs_prof_len].name = name;
    _cs_prof_tbl[_cs_prof_len].count = 1;
    _cs_prof_len++;
}
#else
#define cs_prof_hit(name) ((void)0)
#endif
"""


def prelude(hardline: bool) -> str:
    """Prelude text for one translation unit."""
    parts = [_MACROS]
    if hardline:
        parts.append("#define CS_HARDLINE 1\n")
    parts.append(_PROFILER)
    return "".join(parts)


def assemble_unit(body: str, hardline: bool) -> str:
    """Full translation unit: prelude, then the lowered body."""
    return prelude(hardline) + "\n" + body
